"""Database module for PostgreSQL persistence."""
from .connection import Database
from .models import init_db

__all__ = ["Database", "init_db"]

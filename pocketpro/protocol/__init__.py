"""Protocol module for HTTP request and response schemas."""
from .messages import (
    AddPlayerRequest,
    AddSessionRequest,
    AmountRequest,
    LedgerResponse,
    SessionsResponse,
)

__all__ = [
    "AddPlayerRequest",
    "AddSessionRequest",
    "AmountRequest",
    "LedgerResponse",
    "SessionsResponse",
]

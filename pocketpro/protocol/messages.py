"""Pydantic schemas for the HTTP API."""
from datetime import date as Date
from typing import Optional
from pydantic import BaseModel, Field


# ============= Accounts =============

class RegisterRequest(BaseModel):
    """Sign-up request."""
    email: str
    password: str


class LoginRequest(BaseModel):
    """Sign-in request."""
    email: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user_id: str
    email: str


class RefreshRequest(BaseModel):
    refresh_token: str


class RefreshResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class LogoutRequest(BaseModel):
    """Optional sign-out body; a refresh token given here is revoked too."""
    refresh_token: Optional[str] = None


class ProfileResponse(BaseModel):
    """Signed-in user's profile."""
    id: str
    email: str
    created_at: str
    last_sign_in_at: Optional[str] = None


# ============= Ledger =============

class AddPlayerRequest(BaseModel):
    name: str


class AmountRequest(BaseModel):
    """Buy-in or cash-out amount."""
    amount: float


class PlayerItem(BaseModel):
    id: str
    name: str
    is_active: bool
    buy_ins: list[float]
    total_buy_in: float
    cashout: Optional[float] = None
    net: Optional[float] = None


class SaveStatus(BaseModel):
    """Background persistence status; ``save_error`` is a non-blocking notice."""
    dirty: bool = False
    save_error: Optional[str] = None
    last_saved_at: Optional[str] = None


class LedgerResponse(BaseModel):
    game_id: Optional[str] = None
    total_money_in_play: float
    active_players: list[PlayerItem]
    inactive_players: list[PlayerItem]
    status: SaveStatus


class StandingItem(BaseModel):
    player_id: str
    player: str
    is_active: bool
    buy_ins: float
    cash_out: Optional[float] = None
    net: Optional[float] = None


class StandingsResponse(BaseModel):
    game_id: Optional[str] = None
    players: list[StandingItem]
    table: str


# ============= Income =============

class AddSessionRequest(BaseModel):
    """New session. ``date`` defaults to today."""
    hours: float
    profit: float
    notes: Optional[str] = None
    date: Optional[Date] = None


class UpdateSessionRequest(BaseModel):
    hours: Optional[float] = None
    profit: Optional[float] = None
    notes: Optional[str] = None
    date: Optional[Date] = None


class SessionItem(BaseModel):
    id: str
    date: str
    hours: float
    profit: float
    notes: Optional[str] = None
    hourly_rate: Optional[float] = None


class IncomeStatsItem(BaseModel):
    total_sessions: int
    total_hours: float
    total_profit: float
    hourly_rate: float


class SessionsResponse(BaseModel):
    sessions: list[SessionItem]
    stats: IncomeStatsItem
    loaded_from: Optional[str] = None
    status: SaveStatus = Field(default_factory=SaveStatus)

"""Main FastAPI server for the game ledger and income tracker."""
import asyncio
from collections import defaultdict
from typing import Optional
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Depends, Header
from fastapi.middleware.cors import CORSMiddleware

from pocketpro.config import config
from pocketpro.db.connection import Database
from pocketpro.db.models import init_db
from pocketpro.state.redis_client import RedisClient
from pocketpro.state.game_store import GameStore
from pocketpro.state.session_store import SessionStore
from pocketpro.state.user_store import UserStore
from pocketpro.state.repositories import GameRepository, SessionRepository
from pocketpro.auth.middleware import AuthMiddleware, AuthenticatedUser
from pocketpro.auth.jwt_handler import TokenError
from pocketpro.ledger.game import LedgerError
from pocketpro.ledger.manager import LedgerManager
from pocketpro.ledger.player import Player
from pocketpro.ledger.standings import format_standings_table
from pocketpro.income.manager import IncomeManager
from pocketpro.income.tracker import ConfirmationRequiredError
from pocketpro.protocol.messages import (
    AddPlayerRequest,
    AddSessionRequest,
    AmountRequest,
    IncomeStatsItem,
    LedgerResponse,
    LoginRequest,
    LogoutRequest,
    PlayerItem,
    ProfileResponse,
    RefreshRequest,
    RefreshResponse,
    RegisterRequest,
    SaveStatus,
    SessionItem,
    SessionsResponse,
    StandingItem,
    StandingsResponse,
    TokenResponse,
    UpdateSessionRequest,
)
from pocketpro.utils.logger import get_logger

logger = get_logger(__name__)


class PocketProServer:
    """Server state: storage handles and the per-user ledgers and trackers."""

    def __init__(self):
        self.db: Optional[Database] = None
        self.redis_client: Optional[RedisClient] = None
        self.auth: Optional[AuthMiddleware] = None
        self.user_store: Optional[UserStore] = None
        self.game_store: Optional[GameRepository] = None
        self.session_store: Optional[SessionRepository] = None
        self.ledgers: dict[str, LedgerManager] = {}
        self.incomes: dict[str, IncomeManager] = {}
        self._locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    def configure(
        self,
        auth: Optional[AuthMiddleware],
        user_store: Optional[UserStore],
        game_store: GameRepository,
        session_store: SessionRepository,
    ) -> None:
        """Attach the collaborators used to serve requests."""
        self.auth = auth
        self.user_store = user_store
        self.game_store = game_store
        self.session_store = session_store

    async def initialize(self):
        """Connect to storage and prepare the schema."""
        self.db = Database(config.database_url)
        await self.db.connect()
        await init_db(self.db)

        self.redis_client = RedisClient(config.redis_url)
        await self.redis_client.connect()

        self.configure(
            auth=AuthMiddleware(self.redis_client),
            user_store=UserStore(self.db),
            game_store=GameStore(self.db),
            session_store=SessionStore(self.db, self.redis_client),
        )

        logger.info("PocketPro server initialized")

    async def cleanup(self):
        """Save pending changes and release storage."""
        for user_id in list(self.ledgers.keys() | self.incomes.keys()):
            await self.release_user(user_id)

        if self.redis_client:
            await self.redis_client.disconnect()
        if self.db:
            await self.db.disconnect()

        logger.info("PocketPro server shutdown complete")

    async def get_ledger(self, user_id: str) -> LedgerManager:
        """Get the user's ledger manager, loading it on first use."""
        async with self._locks[f"ledger:{user_id}"]:
            manager = self.ledgers.get(user_id)
            if manager is None:
                manager = LedgerManager(user_id, self.game_store)
                await manager.load()
                self.ledgers[user_id] = manager
        return manager

    async def get_income(self, user_id: str) -> IncomeManager:
        """Get the user's income manager, loading it on first use."""
        async with self._locks[f"income:{user_id}"]:
            manager = self.incomes.get(user_id)
            if manager is None:
                manager = IncomeManager(user_id, self.session_store)
                await manager.load()
                self.incomes[user_id] = manager
        return manager

    async def release_user(self, user_id: str) -> bool:
        """Save and drop a user's in-memory state.

        A manager whose final save fails stays loaded so its changes can be
        saved later. Returns True when everything was saved and dropped.
        """
        released = True
        async with self._locks[f"ledger:{user_id}"]:
            ledger = self.ledgers.get(user_id)
            if ledger is not None:
                if await ledger.close():
                    del self.ledgers[user_id]
                else:
                    logger.warning(f"Keeping unsaved ledger in memory for user {user_id}")
                    released = False

        async with self._locks[f"income:{user_id}"]:
            income = self.incomes.get(user_id)
            if income is not None:
                if await income.close():
                    del self.incomes[user_id]
                else:
                    logger.warning(f"Keeping unsaved sessions in memory for user {user_id}")
                    released = False

        return released


# Global server instance
server = PocketProServer()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    await server.initialize()
    yield
    await server.cleanup()


# Create FastAPI app
app = FastAPI(
    title="PocketPro",
    description="Home game cash ledger and poker income tracker",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware - allow local development
app.add_middleware(
    CORSMiddleware,
    allow_origin_regex=r"http://(localhost|127\.0\.0\.1)(:\d+)?",  # Allow any localhost port
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


async def get_current_user(authorization: str = Header(None)) -> AuthenticatedUser:
    """Resolve the signed-in user from the bearer token."""
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing authorization header")

    token = authorization.split(" ", 1)[1]
    try:
        return await server.auth.authenticate(token)
    except TokenError as e:
        raise HTTPException(status_code=401, detail=str(e))


def _player_item(player: Player) -> PlayerItem:
    return PlayerItem(
        id=player.id,
        name=player.name,
        is_active=player.is_active,
        buy_ins=player.buy_ins,
        total_buy_in=player.total_buy_in,
        cashout=player.cashout,
        net=player.net,
    )


def _ledger_response(manager: LedgerManager) -> LedgerResponse:
    ledger = manager.ledger
    return LedgerResponse(
        game_id=ledger.game_id,
        total_money_in_play=ledger.pot_total,
        active_players=[_player_item(p) for p in ledger.active_players],
        inactive_players=[_player_item(p) for p in ledger.inactive_players],
        status=SaveStatus(**manager.save_status()),
    )


def _sessions_response(manager: IncomeManager) -> SessionsResponse:
    return SessionsResponse(
        sessions=[
            SessionItem(**s.to_dict(), hourly_rate=s.hourly_rate)
            for s in manager.sessions
        ],
        stats=IncomeStatsItem(**manager.stats().to_dict()),
        loaded_from=manager.loaded_from,
        status=SaveStatus(**manager.save_status()),
    )


# Health check
@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


# Auth endpoints
@app.post("/api/register", response_model=TokenResponse)
async def register(request: RegisterRequest):
    """Create an account."""
    try:
        tokens = await server.user_store.register(request.email, request.password)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return TokenResponse(
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
        user_id=tokens.user_id,
        email=tokens.email,
    )


@app.post("/api/login", response_model=TokenResponse)
async def login(request: LoginRequest):
    """Sign in and get tokens."""
    try:
        tokens = await server.user_store.login(request.email, request.password)
    except ValueError as e:
        raise HTTPException(status_code=401, detail=str(e))
    return TokenResponse(
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
        user_id=tokens.user_id,
        email=tokens.email,
    )


@app.post("/api/refresh", response_model=RefreshResponse)
async def refresh_token(request: RefreshRequest):
    """Refresh access token."""
    try:
        new_token = await server.auth.refresh(request.refresh_token)
        return RefreshResponse(access_token=new_token)
    except TokenError as e:
        raise HTTPException(status_code=401, detail=str(e))


@app.post("/api/logout")
async def logout(
    request: Optional[LogoutRequest] = None,
    user: AuthenticatedUser = Depends(get_current_user),
):
    """Sign out: save pending changes and revoke the tokens.

    Changes that cannot be saved stay on the server until a later save works.
    """
    saved = await server.release_user(user.user_id)
    await server.auth.revoke_token(user.token)
    if request is not None and request.refresh_token:
        await server.auth.revoke_token(request.refresh_token)
    return {"message": "Signed out", "saved": saved}


@app.get("/api/me", response_model=ProfileResponse)
async def get_profile(user: AuthenticatedUser = Depends(get_current_user)):
    """Current user's profile."""
    profile = await server.user_store.get_user_by_id(user.user_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="User not found")
    return ProfileResponse(**profile.to_profile())


# Game ledger endpoints
@app.get("/api/ledger", response_model=LedgerResponse)
async def get_ledger(user: AuthenticatedUser = Depends(get_current_user)):
    """Current game: players, pot and save status."""
    manager = await server.get_ledger(user.user_id)
    return _ledger_response(manager)


@app.post("/api/ledger/players", response_model=LedgerResponse)
async def add_player(
    request: AddPlayerRequest,
    user: AuthenticatedUser = Depends(get_current_user),
):
    """Add a player to the game."""
    manager = await server.get_ledger(user.user_id)
    try:
        manager.add_player(request.name)
    except LedgerError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _ledger_response(manager)


@app.post("/api/ledger/players/{player_id}/buy-ins", response_model=LedgerResponse)
async def add_buy_in(
    player_id: str,
    request: AmountRequest,
    user: AuthenticatedUser = Depends(get_current_user),
):
    """Record a buy-in."""
    manager = await server.get_ledger(user.user_id)
    try:
        manager.add_buy_in(player_id, request.amount)
    except LedgerError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _ledger_response(manager)


@app.post("/api/ledger/players/{player_id}/cash-out", response_model=LedgerResponse)
async def cash_out(
    player_id: str,
    request: AmountRequest,
    user: AuthenticatedUser = Depends(get_current_user),
):
    """Cash a player out of the pot."""
    manager = await server.get_ledger(user.user_id)
    try:
        manager.cash_out(player_id, request.amount)
    except LedgerError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _ledger_response(manager)


@app.post("/api/ledger/players/{player_id}/toggle", response_model=LedgerResponse)
async def toggle_player(
    player_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
):
    """Move a player between in play and out (rejoin)."""
    manager = await server.get_ledger(user.user_id)
    try:
        manager.toggle_player_status(player_id)
    except LedgerError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _ledger_response(manager)


@app.delete("/api/ledger/players/{player_id}", response_model=LedgerResponse)
async def remove_player(
    player_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
):
    """Remove a player from the game."""
    manager = await server.get_ledger(user.user_id)
    manager.remove_player(player_id)
    return _ledger_response(manager)


@app.get("/api/ledger/standings", response_model=StandingsResponse)
async def get_standings(user: AuthenticatedUser = Depends(get_current_user)):
    """Per-player buy-ins, cash-outs and net."""
    manager = await server.get_ledger(user.user_id)
    standings = manager.standings()
    return StandingsResponse(
        game_id=manager.ledger.game_id,
        players=[StandingItem(**s.to_dict()) for s in standings],
        table=format_standings_table(standings),
    )


@app.post("/api/ledger/save", response_model=SaveStatus)
async def save_ledger(user: AuthenticatedUser = Depends(get_current_user)):
    """Save the game now instead of waiting for autosave."""
    manager = await server.get_ledger(user.user_id)
    await manager.save()
    return SaveStatus(**manager.save_status())


@app.post("/api/ledger/end", response_model=LedgerResponse)
async def end_game(user: AuthenticatedUser = Depends(get_current_user)):
    """Finish the current game and start a new, empty one."""
    manager = await server.get_ledger(user.user_id)
    if not await manager.end_game():
        raise HTTPException(status_code=503, detail="Could not end the game; it is kept in memory")
    return _ledger_response(manager)


# Income tracker endpoints
@app.get("/api/sessions", response_model=SessionsResponse)
async def list_sessions(user: AuthenticatedUser = Depends(get_current_user)):
    """All sessions (newest first) with statistics."""
    manager = await server.get_income(user.user_id)
    return _sessions_response(manager)


@app.post("/api/sessions", response_model=SessionsResponse)
async def add_session(
    request: AddSessionRequest,
    user: AuthenticatedUser = Depends(get_current_user),
):
    """Record a session."""
    manager = await server.get_income(user.user_id)
    try:
        manager.add_session(request.hours, request.profit, notes=request.notes, on=request.date)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _sessions_response(manager)


@app.patch("/api/sessions/{session_id}", response_model=SessionsResponse)
async def update_session(
    session_id: str,
    request: UpdateSessionRequest,
    user: AuthenticatedUser = Depends(get_current_user),
):
    """Edit a session."""
    manager = await server.get_income(user.user_id)
    if manager.tracker.get_session(session_id) is None:
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found")
    try:
        manager.update_session(
            session_id,
            hours=request.hours,
            profit=request.profit,
            notes=request.notes,
            on=request.date,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _sessions_response(manager)


@app.delete("/api/sessions/{session_id}", response_model=SessionsResponse)
async def delete_session(
    session_id: str,
    confirm: bool = False,
    user: AuthenticatedUser = Depends(get_current_user),
):
    """Delete a session. Requires ``?confirm=true``."""
    manager = await server.get_income(user.user_id)
    try:
        manager.delete_session(session_id, confirmed=confirm)
    except ConfirmationRequiredError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _sessions_response(manager)


@app.post("/api/sessions/save", response_model=SaveStatus)
async def save_sessions(user: AuthenticatedUser = Depends(get_current_user)):
    """Save sessions to the database now."""
    manager = await server.get_income(user.user_id)
    await manager.save()
    return SaveStatus(**manager.save_status())


# Entry point
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "pocketpro.main:app",
        host=config.host,
        port=config.port,
        reload=True,
    )

'''
Codle API

Codle (daily, single player):
GET  /today                -> today's attempts with marks
POST /guess                -> submit a 4-digit guess

Duel (two players, chosen secrets):
POST /duel/create          -> open a match, get an invite code
POST /duel/join            -> take seat 2
POST /duel/secret          -> set your secret
POST /duel/guess           -> guess the opponent's secret
GET  /duel/state           -> match, moves, secret flags

Box Match (daily colour placement):
GET  /box/state            -> today's attempts for a difficulty
POST /box/guess            -> submit a colour order

GridLink (two players, piece placement):
POST /gridlink/create      -> open a match
POST /gridlink/join        -> take seat 2, match starts
POST /gridlink/move        -> drop a piece
GET  /gridlink/state       -> match, inventory, moves, board

Storage is in memory; every secret is rebuilt from DAILY_SEED and the date.
'''

import logging

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import APP_ENV, BOX_DIFFICULTIES, BOX_PALETTE, LOG_LEVEL, read_daily_seed
from .engine import evaluate
from .errors import ConfigurationError, ConflictError, NotFoundError, PermissionDenied, ValidationError
from .secret import daily_box_secret_keys, daily_secret, game_date
from .store import DailyStore, DuelMatch, DuelStore, GridLinkMatch, GridLinkStore
from .schemas import (
    AttemptOut,
    BoxAttemptOut,
    BoxGuessOut,
    BoxGuessRequest,
    BoxStateOut,
    CellOut,
    DuelGuessOut,
    DuelGuessRequest,
    DuelMatchOut,
    DuelMoveOut,
    DuelSecretOut,
    DuelSecretRequest,
    DuelSecretsOut,
    DuelStateOut,
    GridLinkMatchOut,
    GridLinkMoveEntryOut,
    GridLinkMoveOut,
    GridLinkMoveRequest,
    GridLinkStateOut,
    GuessOut,
    GuessRequest,
    InventoryItemOut,
    JoinOut,
    JoinRequest,
    MatchCreatedOut,
    PaletteColorOut,
    PlayerRequest,
    TodayOut,
)

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(title="Codle API", version="1.0.0")

# Allow everything in dev so the docs and front-end work easily
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"]
)

# --- Dev convenience: warn at boot instead of on the first request ---
if APP_ENV == "local":
    @app.on_event("startup")
    def _dev_check_seed():
        try:
            read_daily_seed()
        except ConfigurationError as exc:
            logger.warning("%s Daily puzzles will fail until it is set.", exc)

# ---------------- Errors ----------------

def _error(status_code: int, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})

@app.exception_handler(ValidationError)
async def _on_validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    return _error(400, exc)

@app.exception_handler(PermissionDenied)
async def _on_permission_denied(request: Request, exc: PermissionDenied) -> JSONResponse:
    return _error(403, exc)

@app.exception_handler(NotFoundError)
async def _on_not_found(request: Request, exc: NotFoundError) -> JSONResponse:
    return _error(404, exc)

@app.exception_handler(ConflictError)
async def _on_conflict(request: Request, exc: ConflictError) -> JSONResponse:
    return _error(409, exc)

@app.exception_handler(ConfigurationError)
async def _on_configuration_error(request: Request, exc: ConfigurationError) -> JSONResponse:
    logger.error("configuration error on %s: %s", request.url.path, exc)
    return _error(500, exc)

# ---------------- Dependencies ----------------

_daily_store = DailyStore()
_duel_store = DuelStore()
_gridlink_store = GridLinkStore()

def get_daily_seed() -> str:
    return read_daily_seed()

def get_game_date() -> str:
    return game_date()

def get_daily_store() -> DailyStore:
    return _daily_store

def get_duel_store() -> DuelStore:
    return _duel_store

def get_gridlink_store() -> GridLinkStore:
    return _gridlink_store

# ---------------- Codle ----------------

@app.get("/today", response_model=TodayOut, summary="Today's attempts with marks")
def get_today(
    player_id: str,
    date: str = Depends(get_game_date),
    seed: str = Depends(get_daily_seed),
    store: DailyStore = Depends(get_daily_store),
) -> TodayOut:
    secret = daily_secret(date, seed, store.length)
    # marks are not stored, they are recomputed from the secret
    attempts = [
        AttemptOut(
            attempt_number=a.attempt_number,
            guess=a.guess,
            bulls=a.bulls,
            cows=a.cows,
            marks=evaluate(secret, a.guess, store.length).marks,
            created_at=a.created_at,
        )
        for a in store.attempts(player_id, date)
    ]
    return TodayOut(
        date=date,
        length=store.length,
        max_attempts=store.max_attempts,
        attempts=attempts,
        won=store.has_won(player_id, date),
        attempts_remaining=max(store.max_attempts - len(attempts), 0),
    )

@app.post("/guess", response_model=GuessOut, summary="Submit today's guess")
def submit_guess(
    payload: GuessRequest,
    date: str = Depends(get_game_date),
    seed: str = Depends(get_daily_seed),
    store: DailyStore = Depends(get_daily_store),
) -> GuessOut:
    secret = daily_secret(date, seed, store.length)
    entry, result = store.guess(payload.player_id, date, secret, payload.guess)
    return GuessOut(
        date=date,
        length=store.length,
        max_attempts=store.max_attempts,
        attempt_number=entry.attempt_number,
        bulls=result.bulls,
        cows=result.cows,
        marks=result.marks,
        win=result.bulls == store.length,
        attempts_remaining=store.max_attempts - entry.attempt_number,
    )

# ---------------- Duel ----------------

def _duel_for_player(store: DuelStore, match_id: str, player_id: str) -> DuelMatch:
    match = store.get(match_id)
    if not match:
        raise HTTPException(status_code=404, detail="Match not found")
    if match.seat_of(player_id) is None:
        raise HTTPException(status_code=403, detail="Not in match")
    return match

@app.post("/duel/create", response_model=MatchCreatedOut, summary="Open a duel")
def duel_create(payload: PlayerRequest, store: DuelStore = Depends(get_duel_store)) -> MatchCreatedOut:
    match = store.create(payload.player_id)
    return MatchCreatedOut(match_id=match.id, code=match.code, status=match.status)

@app.post("/duel/join", response_model=JoinOut, summary="Join a duel by invite code")
def duel_join(payload: JoinRequest, store: DuelStore = Depends(get_duel_store)) -> JoinOut:
    joined = store.join(payload.code, payload.player_id)
    if not joined:
        raise HTTPException(status_code=404, detail="Match not found")
    match, already = joined
    return JoinOut(match_id=match.id, status=match.status, already_joined=already)

@app.post("/duel/secret", response_model=DuelSecretOut, summary="Set your secret")
def duel_secret(payload: DuelSecretRequest, store: DuelStore = Depends(get_duel_store)) -> DuelSecretOut:
    match = store.set_secret(payload.match_id, payload.player_id, payload.secret)
    if not match:
        raise HTTPException(status_code=404, detail="Match not found")
    return DuelSecretOut(status=match.status, turn_player_id=match.turn_player_id)

@app.post("/duel/guess", response_model=DuelGuessOut, summary="Guess the opponent's secret")
def duel_guess(payload: DuelGuessRequest, store: DuelStore = Depends(get_duel_store)) -> DuelGuessOut:
    outcome = store.guess(payload.match_id, payload.player_id, payload.guess)
    if not outcome:
        raise HTTPException(status_code=404, detail="Match not found")
    move, match = outcome
    return DuelGuessOut(
        bulls=move.bulls,
        cows=move.cows,
        marks=move.marks,
        win=match.winner_player_id == payload.player_id,
        status=match.status,
        next_turn_player_id=match.turn_player_id,
        attempts_remaining=store.max_attempts - match.attempts_used(payload.player_id),
    )

@app.get("/duel/state", response_model=DuelStateOut, summary="Duel state for one player")
def duel_state(match_id: str, player_id: str, store: DuelStore = Depends(get_duel_store)) -> DuelStateOut:
    match = _duel_for_player(store, match_id, player_id)
    opponent = match.opponent_of(player_id)
    opponent_secret = None
    if match.status == "finished" and opponent:
        opponent_secret = match.secrets.get(opponent)

    return DuelStateOut(
        match=DuelMatchOut(
            id=match.id,
            code=match.code,
            status=match.status,
            turn_player_id=match.turn_player_id,
            winner_player_id=match.winner_player_id,
        ),
        seat=match.seat_of(player_id),
        opponent_player_id=opponent,
        moves=[
            DuelMoveOut(
                id=m.id,
                by_player_id=m.by_player_id,
                guess=m.guess,
                bulls=m.bulls,
                cows=m.cows,
                marks=m.marks,
                created_at=m.created_at,
            )
            for m in match.moves
        ],
        secrets=DuelSecretsOut(
            my_secret_set=player_id in match.secrets,
            opponent_secret_set=opponent is not None and opponent in match.secrets,
            count=len(match.secrets),
            opponent_secret=opponent_secret,
        ),
        attempts_remaining=store.max_attempts - match.attempts_used(player_id),
    )

# ---------------- Box Match ----------------

def _check_difficulty(difficulty: str) -> None:
    if difficulty not in BOX_DIFFICULTIES:
        raise HTTPException(status_code=400, detail="Invalid difficulty")

@app.get("/box/state", response_model=BoxStateOut, summary="Today's Box Match attempts")
def box_state(
    difficulty: str,
    player_id: str,
    date: str = Depends(get_game_date),
    store: DailyStore = Depends(get_daily_store),
) -> BoxStateOut:
    _check_difficulty(difficulty)
    length = BOX_DIFFICULTIES[difficulty].length
    attempts = store.box_attempts(player_id, date, difficulty)
    return BoxStateOut(
        date=date,
        difficulty=difficulty,
        length=length,
        palette=[PaletteColorOut(key=c.key, label=c.label, hex=c.hex) for c in BOX_PALETTE[:length]],
        attempts=[
            BoxAttemptOut(
                id=a.id,
                guess=a.guess,
                correct_positions=a.correct_positions,
                created_at=a.created_at,
            )
            for a in attempts
        ],
        won=any(a.correct_positions == length for a in attempts),
    )

@app.post("/box/guess", response_model=BoxGuessOut, summary="Submit a Box Match order")
def box_guess(
    payload: BoxGuessRequest,
    date: str = Depends(get_game_date),
    seed: str = Depends(get_daily_seed),
    store: DailyStore = Depends(get_daily_store),
) -> BoxGuessOut:
    _check_difficulty(payload.difficulty)
    length = BOX_DIFFICULTIES[payload.difficulty].length
    secret = daily_box_secret_keys(date, payload.difficulty, seed)
    entry = store.box_guess(payload.player_id, date, payload.difficulty, secret, payload.guess)
    return BoxGuessOut(
        correct_positions=entry.correct_positions,
        length=length,
        is_win=entry.correct_positions == length,
    )

# ---------------- GridLink ----------------

def _gridlink_for_player(store: GridLinkStore, match_id: str, player_id: str) -> GridLinkMatch:
    match = store.get(match_id)
    if not match:
        raise HTTPException(status_code=404, detail="Match not found")
    if match.seat_of(player_id) is None:
        raise HTTPException(status_code=403, detail="Not in match")
    return match

@app.post("/gridlink/create", response_model=MatchCreatedOut, summary="Open a GridLink match")
def gridlink_create(payload: PlayerRequest, store: GridLinkStore = Depends(get_gridlink_store)) -> MatchCreatedOut:
    match = store.create(payload.player_id)
    return MatchCreatedOut(match_id=match.id, code=match.code, status=match.status)

@app.post("/gridlink/join", response_model=JoinOut, summary="Join a GridLink match by invite code")
def gridlink_join(payload: JoinRequest, store: GridLinkStore = Depends(get_gridlink_store)) -> JoinOut:
    joined = store.join(payload.code, payload.player_id)
    if not joined:
        raise HTTPException(status_code=404, detail="Match not found")
    match, already = joined
    return JoinOut(match_id=match.id, status=match.status, already_joined=already)

@app.post("/gridlink/move", response_model=GridLinkMoveOut, summary="Drop a piece")
def gridlink_move(
    payload: GridLinkMoveRequest,
    store: GridLinkStore = Depends(get_gridlink_store),
) -> GridLinkMoveOut:
    outcome = store.move(
        payload.match_id,
        payload.player_id,
        payload.inventory_id,
        payload.rotation,
        payload.mirrored,
        payload.drop_x,
    )
    if not outcome:
        raise HTTPException(status_code=404, detail="Match not found")
    move, won, match = outcome
    return GridLinkMoveOut(
        drop_x=move.drop_x,
        drop_y=move.drop_y,
        cells=[CellOut(x=c.x, y=c.y) for c in move.cells],
        is_win=won,
        status=match.status,
        next_turn_player_id=match.turn_player_id,
    )

@app.get("/gridlink/state", response_model=GridLinkStateOut, summary="GridLink state for one player")
def gridlink_state(
    match_id: str,
    player_id: str,
    store: GridLinkStore = Depends(get_gridlink_store),
) -> GridLinkStateOut:
    match = _gridlink_for_player(store, match_id, player_id)
    return GridLinkStateOut(
        match=GridLinkMatchOut(
            id=match.id,
            code=match.code,
            status=match.status,
            turn_player_id=match.turn_player_id,
            winner_player_id=match.winner_player_id,
        ),
        seat=match.seat_of(player_id),
        opponent_player_id=match.opponent_of(player_id),
        inventory=[
            InventoryItemOut(id=i.id, piece_id=i.piece_id, used=i.used)
            for i in match.inventories.get(player_id, [])
        ],
        moves=[
            GridLinkMoveEntryOut(
                id=m.id,
                by_player_id=m.by_player_id,
                player=m.player,
                piece_id=m.piece_id,
                rotation=m.rotation,
                mirrored=m.mirrored,
                drop_x=m.drop_x,
                drop_y=m.drop_y,
                cells=[CellOut(x=c.x, y=c.y) for c in m.cells],
                created_at=m.created_at,
            )
            for m in match.moves
        ],
        board=match.board(),
    )

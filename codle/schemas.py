"""
Explicit validation & Pydantic models
- Defines the structure of API requests and responses.
- Shape checks that depend on game state (attempts left, whose turn it is)
  live in the stores, so they are not repeated here.
"""

from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from .types import Difficulty, DuelStatus, Mark, MatchStatus, Player


class PlayerRequest(BaseModel):
    player_id: str = Field(..., min_length=1, description="Opaque id of the caller")


# ---------------- Codle ----------------

class GuessRequest(PlayerRequest):
    guess: str = Field(..., description="Four digits, duplicates allowed")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"player_id": "anna", "guess": "0123"},
                {"player_id": "anna", "guess": "1123"},
            ]
        }
    }


class AttemptOut(BaseModel):
    attempt_number: int = Field(..., description="1-based attempt number for the day")
    guess: str
    bulls: int = Field(..., description="Right digit, right place")
    cows: int = Field(..., description="Right digit, wrong place")
    marks: List[Mark] = Field(..., description="Per-position feedback")
    created_at: float


class TodayOut(BaseModel):
    date: str = Field(..., description="Game date (Europe/Rome), YYYY-MM-DD")
    length: int
    max_attempts: int
    attempts: List[AttemptOut]
    won: bool
    attempts_remaining: int


class GuessOut(BaseModel):
    date: str
    length: int
    max_attempts: int
    attempt_number: int
    bulls: int
    cows: int
    marks: List[Mark]
    win: bool
    attempts_remaining: int


# ---------------- Duel ----------------

class JoinRequest(PlayerRequest):
    code: str = Field(..., min_length=1, description="Invite code shared by the match creator")

    @field_validator("code")
    @classmethod
    def normalize_code(cls, code: str) -> str:
        # codes are shown upper-case; accept whatever the player typed
        return code.strip().upper()


class MatchCreatedOut(BaseModel):
    match_id: str
    code: str
    status: str


class JoinOut(BaseModel):
    match_id: str
    status: str
    already_joined: bool


class DuelSecretRequest(PlayerRequest):
    match_id: str
    secret: str = Field(..., description="Four digits the opponent has to find")


class DuelSecretOut(BaseModel):
    status: DuelStatus
    turn_player_id: Optional[str] = None


class DuelGuessRequest(PlayerRequest):
    match_id: str
    guess: str


class DuelGuessOut(BaseModel):
    bulls: int
    cows: int
    marks: List[Mark]
    win: bool
    status: DuelStatus
    next_turn_player_id: Optional[str] = None
    attempts_remaining: int


class DuelMoveOut(BaseModel):
    id: str
    by_player_id: str
    guess: str
    bulls: int
    cows: int
    marks: List[Mark]
    created_at: float


class DuelMatchOut(BaseModel):
    id: str
    code: str
    status: DuelStatus
    turn_player_id: Optional[str] = None
    winner_player_id: Optional[str] = None


class DuelSecretsOut(BaseModel):
    my_secret_set: bool
    opponent_secret_set: bool
    count: int
    # only revealed once the match is over
    opponent_secret: Optional[str] = None


class DuelStateOut(BaseModel):
    match: DuelMatchOut
    seat: int
    opponent_player_id: Optional[str] = None
    moves: List[DuelMoveOut]
    secrets: DuelSecretsOut
    attempts_remaining: int


# ---------------- Box Match ----------------

class BoxGuessRequest(PlayerRequest):
    difficulty: str = Field(..., description="superEasy | easy | medium | hard")
    guess: List[str] = Field(..., description="Colour keys, one per slot, no repeats")


class BoxGuessOut(BaseModel):
    correct_positions: int = Field(..., description="Slots holding the right colour")
    length: int
    is_win: bool


class PaletteColorOut(BaseModel):
    key: str
    label: str
    hex: str


class BoxAttemptOut(BaseModel):
    id: str
    guess: List[str]
    correct_positions: int
    created_at: float


class BoxStateOut(BaseModel):
    date: str
    difficulty: Difficulty
    length: int
    palette: List[PaletteColorOut]
    attempts: List[BoxAttemptOut]
    won: bool


# ---------------- GridLink ----------------

class CellOut(BaseModel):
    x: int
    y: int


class GridLinkMoveRequest(PlayerRequest):
    match_id: str
    inventory_id: str
    rotation: int = Field(0, description="Quarter turns clockwise, 0..3")
    mirrored: bool = Field(False, description="Mirror before rotating")
    drop_x: int = Field(..., description="Column of the piece's left edge, 0..8")


class GridLinkMoveOut(BaseModel):
    drop_x: int
    drop_y: int
    cells: List[CellOut]
    is_win: bool
    status: MatchStatus
    next_turn_player_id: Optional[str] = None


class InventoryItemOut(BaseModel):
    id: str
    piece_id: str
    used: bool


class GridLinkMoveEntryOut(BaseModel):
    id: str
    by_player_id: str
    player: Player
    piece_id: str
    rotation: int
    mirrored: bool
    drop_x: int
    drop_y: int
    cells: List[CellOut]
    created_at: float


class GridLinkMatchOut(BaseModel):
    id: str
    code: str
    status: MatchStatus
    turn_player_id: Optional[str] = None
    winner_player_id: Optional[str] = None


class GridLinkStateOut(BaseModel):
    match: GridLinkMatchOut
    seat: int
    opponent_player_id: Optional[str] = None
    inventory: List[InventoryItemOut]
    moves: List[GridLinkMoveEntryOut]
    board: List[List[Optional[Player]]] = Field(..., description="board[y][x]")

"""
In-memory store
Holds attempts and matches in memory, one RLock per store.

The routes pass in everything that comes from the outside (secret, date,
player id); the stores enforce the game rules (turns, attempt caps, one win per
day) and never change state when they reject a request.
"""

import logging
from dataclasses import dataclass, field
from secrets import choice, randbelow
from threading import RLock
from time import time
from typing import Callable, Dict, List, Optional, Tuple
from uuid import uuid4

from .config import (
    BOARD_SIZE,
    BOX_DIFFICULTIES,
    CODE_LENGTH,
    DUEL_MAX_ATTEMPTS,
    INVITE_CODE_ALPHABET,
    INVITE_CODE_LENGTH,
    INVITE_CODE_RETRIES,
    MAX_ATTEMPTS,
)
from .engine import Evaluation, correct_positions, evaluate, is_win, validate_box_guess, validate_digits
from .errors import ConflictError, NotFoundError, PermissionDenied, ValidationError
from .gridlink.engine import Board, board_from_moves, check_win, drop_piece
from .gridlink.pieces import starting_inventory
from .types import Cell, DuelStatus, Marks, MatchStatus, PieceId, Player

logger = logging.getLogger(__name__)


def make_invite_code(length: int = INVITE_CODE_LENGTH) -> str:
    return "".join(choice(INVITE_CODE_ALPHABET) for _ in range(length))


def unique_invite_code(taken: Callable[[str], bool]) -> str:
    for _ in range(INVITE_CODE_RETRIES):
        code = make_invite_code()
        if not taken(code):
            return code
    raise RuntimeError("Code generation failed")


# ---------------- Codle + Box Match (daily, single player) ----------------

@dataclass
class AttemptEntry:
    attempt_number: int
    guess: str
    bulls: int
    cows: int
    created_at: float = field(default_factory=time)


@dataclass
class BoxAttemptEntry:
    id: str
    guess: List[str]
    correct_positions: int
    created_at: float = field(default_factory=time)


class DailyStore:
    def __init__(self, max_attempts: int = MAX_ATTEMPTS, length: int = CODE_LENGTH) -> None:
        self.max_attempts = max_attempts
        self.length = length
        self._attempts: Dict[Tuple[str, str], List[AttemptEntry]] = {}
        self._box: Dict[Tuple[str, str, str], List[BoxAttemptEntry]] = {}
        self._lock = RLock()

    def attempts(self, player_id: str, date: str) -> List[AttemptEntry]:
        with self._lock:
            return list(self._attempts.get((player_id, date), []))

    def _solved(self, history: List[AttemptEntry]) -> bool:
        return any(a.bulls == self.length for a in history)

    def has_won(self, player_id: str, date: str) -> bool:
        return self._solved(self.attempts(player_id, date))

    def guess(self, player_id: str, date: str, secret: str, attempt: str) -> Tuple[AttemptEntry, Evaluation]:
        validate_digits(attempt, self.length)
        with self._lock:
            history = self._attempts.setdefault((player_id, date), [])

            if self._solved(history):
                raise ConflictError("Game already won for today.")
            if len(history) >= self.max_attempts:
                raise ConflictError("No attempts left for today.")

            result = evaluate(secret, attempt, self.length)
            entry = AttemptEntry(
                attempt_number=len(history) + 1,
                guess=attempt,
                bulls=result.bulls,
                cows=result.cows,
            )
            history.append(entry)

        if is_win(result, self.length):
            logger.info("player %s solved %s in %d attempt(s)", player_id, date, entry.attempt_number)
        return entry, result

    def box_attempts(self, player_id: str, date: str, difficulty: str) -> List[BoxAttemptEntry]:
        with self._lock:
            return list(self._box.get((player_id, date, difficulty), []))

    def box_guess(
        self, player_id: str, date: str, difficulty: str, secret: List[str], guess: List[str]
    ) -> BoxAttemptEntry:
        guess = validate_box_guess(guess, difficulty)
        length = BOX_DIFFICULTIES[difficulty].length
        with self._lock:
            history = self._box.setdefault((player_id, date, difficulty), [])
            if any(a.correct_positions == length for a in history):
                raise ConflictError("Box already solved for today.")

            entry = BoxAttemptEntry(
                id=str(uuid4()),
                guess=guess,
                correct_positions=correct_positions(guess, secret),
            )
            history.append(entry)
            return entry


# ---------------- Duel (two players, chosen secrets) ----------------

@dataclass
class DuelMove:
    id: str
    by_player_id: str
    guess: str
    bulls: int
    cows: int
    marks: Marks
    created_at: float = field(default_factory=time)


@dataclass
class DuelMatch:
    id: str
    code: str
    status: DuelStatus = "waiting"
    seats: Dict[int, str] = field(default_factory=dict)     # seat -> player id
    secrets: Dict[str, str] = field(default_factory=dict)   # player id -> secret
    turn_player_id: Optional[str] = None
    winner_player_id: Optional[str] = None
    moves: List[DuelMove] = field(default_factory=list)
    created_at: float = field(default_factory=time)
    updated_at: float = field(default_factory=time)

    def seat_of(self, player_id: str) -> Optional[int]:
        for seat, pid in self.seats.items():
            if pid == player_id:
                return seat
        return None

    def opponent_of(self, player_id: str) -> Optional[str]:
        for pid in self.seats.values():
            if pid != player_id:
                return pid
        return None

    def attempts_used(self, player_id: str) -> int:
        return sum(1 for m in self.moves if m.by_player_id == player_id)


class DuelStore:
    def __init__(self, max_attempts: int = DUEL_MAX_ATTEMPTS, length: int = CODE_LENGTH) -> None:
        self.max_attempts = max_attempts
        self.length = length
        self._matches: Dict[str, DuelMatch] = {}
        self._by_code: Dict[str, str] = {}
        self._lock = RLock()

    def get(self, match_id: str) -> Optional[DuelMatch]:
        with self._lock:
            return self._matches.get(match_id)

    def create(self, player_id: str) -> DuelMatch:
        with self._lock:
            code = unique_invite_code(lambda c: c in self._by_code)
            match = DuelMatch(id=str(uuid4()), code=code, seats={1: player_id})
            self._matches[match.id] = match
            self._by_code[code] = match.id
        logger.info("duel %s created by %s", match.id, player_id)
        return match

    def join(self, code: str, player_id: str) -> Optional[Tuple[DuelMatch, bool]]:
        """Returns (match, already_joined), or None for an unknown code."""
        with self._lock:
            match_id = self._by_code.get(code)
            if match_id is None:
                return None
            match = self._matches[match_id]

            if match.seat_of(player_id) is not None:
                return match, True
            if 2 in match.seats:
                raise ConflictError("Match full")

            match.seats[2] = player_id
            if match.status == "waiting":
                match.status = "secrets"
            match.updated_at = time()
        logger.info("duel %s joined by %s", match.id, player_id)
        return match, False

    def set_secret(self, match_id: str, player_id: str, secret: str) -> Optional[DuelMatch]:
        validate_digits(secret, self.length, "secret")
        with self._lock:
            match = self._matches.get(match_id)
            if match is None:
                return None
            if match.seat_of(player_id) is None:
                raise PermissionDenied("Not in match")
            if match.status in ("active", "finished"):
                raise ConflictError("Secrets are locked once the match has started")

            match.secrets[player_id] = secret
            match.updated_at = time()

            have_all = len(match.seats) == 2 and all(pid in match.secrets for pid in match.seats.values())
            if have_all:
                match.status = "active"
                match.turn_player_id = match.seats[1 + randbelow(2)]
                logger.info("duel %s started, %s moves first", match.id, match.turn_player_id)
            elif len(match.seats) == 2:
                match.status = "secrets"
            return match

    def guess(self, match_id: str, player_id: str, attempt: str) -> Optional[Tuple[DuelMove, DuelMatch]]:
        validate_digits(attempt, self.length)
        with self._lock:
            match = self._matches.get(match_id)
            if match is None:
                return None
            if match.seat_of(player_id) is None:
                raise PermissionDenied("Not in match")
            if match.status != "active" or match.winner_player_id:
                raise ConflictError("Match not active")
            if match.turn_player_id != player_id:
                raise ConflictError("Not your turn")
            if match.attempts_used(player_id) >= self.max_attempts:
                raise ConflictError("No attempts left")

            opponent = match.opponent_of(player_id)
            opponent_secret = match.secrets.get(opponent) if opponent else None
            if not opponent_secret:
                raise ConflictError("Opponent secret missing")

            result = evaluate(opponent_secret, attempt, self.length)
            move = DuelMove(
                id=str(uuid4()),
                by_player_id=player_id,
                guess=attempt,
                bulls=result.bulls,
                cows=result.cows,
                marks=result.marks,
            )
            match.moves.append(move)
            match.updated_at = time()

            if is_win(result, self.length):
                match.status = "finished"
                match.winner_player_id = player_id
                match.turn_player_id = None
                logger.info("duel %s won by %s", match.id, player_id)
            elif match.attempts_used(opponent) < self.max_attempts:
                match.turn_player_id = opponent
            elif match.attempts_used(player_id) >= self.max_attempts:
                match.status = "finished"
                match.turn_player_id = None
                logger.info("duel %s finished without a winner", match.id)
            return move, match


# ---------------- GridLink (two players, piece placement) ----------------

@dataclass
class InventoryItem:
    id: str
    piece_id: PieceId
    used: bool = False


@dataclass
class GridLinkMove:
    id: str
    by_player_id: str
    player: Player
    inventory_id: str
    piece_id: PieceId
    rotation: int
    mirrored: bool
    drop_x: int
    drop_y: int
    cells: List[Cell]
    created_at: float = field(default_factory=time)


@dataclass
class GridLinkMatch:
    id: str
    code: str
    status: MatchStatus = "waiting"
    seats: Dict[int, str] = field(default_factory=dict)
    inventories: Dict[str, List[InventoryItem]] = field(default_factory=dict)
    turn_player_id: Optional[str] = None
    winner_player_id: Optional[str] = None
    moves: List[GridLinkMove] = field(default_factory=list)
    created_at: float = field(default_factory=time)
    updated_at: float = field(default_factory=time)

    def seat_of(self, player_id: str) -> Optional[int]:
        for seat, pid in self.seats.items():
            if pid == player_id:
                return seat
        return None

    def opponent_of(self, player_id: str) -> Optional[str]:
        for pid in self.seats.values():
            if pid != player_id:
                return pid
        return None

    def mark_of(self, player_id: str) -> Optional[Player]:
        seat = self.seat_of(player_id)
        if seat is None:
            return None
        return "P1" if seat == 1 else "P2"

    def pieces_left(self, player_id: str) -> int:
        return sum(1 for item in self.inventories.get(player_id, []) if not item.used)

    def board(self) -> Board:
        return board_from_moves((m.player, m.cells) for m in self.moves)


def validate_move_params(rotation: object, drop_x: object, board_size: int = BOARD_SIZE) -> None:
    # bool is an int subclass; True must not pass as rotation 1
    if not isinstance(rotation, int) or isinstance(rotation, bool) or not 0 <= rotation <= 3:
        raise ValidationError("Invalid rotation")
    if not isinstance(drop_x, int) or isinstance(drop_x, bool) or not 0 <= drop_x < board_size:
        raise ValidationError("Invalid drop_x")


def _new_inventory() -> List[InventoryItem]:
    return [InventoryItem(id=str(uuid4()), piece_id=piece_id) for piece_id in starting_inventory()]


class GridLinkStore:
    def __init__(self) -> None:
        self._matches: Dict[str, GridLinkMatch] = {}
        self._by_code: Dict[str, str] = {}
        self._lock = RLock()

    def get(self, match_id: str) -> Optional[GridLinkMatch]:
        with self._lock:
            return self._matches.get(match_id)

    def create(self, player_id: str) -> GridLinkMatch:
        with self._lock:
            code = unique_invite_code(lambda c: c in self._by_code)
            match = GridLinkMatch(
                id=str(uuid4()),
                code=code,
                seats={1: player_id},
                inventories={player_id: _new_inventory()},
            )
            self._matches[match.id] = match
            self._by_code[code] = match.id
        logger.info("gridlink %s created by %s", match.id, player_id)
        return match

    def join(self, code: str, player_id: str) -> Optional[Tuple[GridLinkMatch, bool]]:
        """Seat 2 joins and the match starts right away with a random first player."""
        with self._lock:
            match_id = self._by_code.get(code)
            if match_id is None:
                return None
            match = self._matches[match_id]

            if match.seat_of(player_id) is not None:
                return match, True
            if 2 in match.seats:
                raise ConflictError("Match full")

            match.seats[2] = player_id
            match.inventories[player_id] = _new_inventory()
            if match.status == "waiting":
                match.status = "active"
                match.turn_player_id = match.seats[1 + randbelow(2)]
            match.updated_at = time()
        logger.info("gridlink %s started, %s moves first", match.id, match.turn_player_id)
        return match, False

    def move(
        self,
        match_id: str,
        player_id: str,
        inventory_id: str,
        rotation: int,
        mirrored: bool,
        drop_x: int,
    ) -> Optional[Tuple[GridLinkMove, bool, GridLinkMatch]]:
        """Returns (move, is_win, match), or None for an unknown match."""
        validate_move_params(rotation, drop_x)
        with self._lock:
            match = self._matches.get(match_id)
            if match is None:
                return None
            mark = match.mark_of(player_id)
            if mark is None:
                raise PermissionDenied("Not in match")
            if match.status != "active" or match.winner_player_id:
                raise ConflictError("Match not active")
            if match.turn_player_id != player_id:
                raise ConflictError("Not your turn")

            item = next((i for i in match.inventories[player_id] if i.id == inventory_id), None)
            if item is None:
                raise NotFoundError("Piece not found")
            if item.used:
                raise ConflictError("Piece already used")

            board = match.board()
            placement = drop_piece(board, item.piece_id, rotation, mirrored, drop_x)
            if placement is None:
                raise ConflictError("Cannot drop here")

            move = GridLinkMove(
                id=str(uuid4()),
                by_player_id=player_id,
                player=mark,
                inventory_id=item.id,
                piece_id=item.piece_id,
                rotation=rotation,
                mirrored=mirrored,
                drop_x=placement.x,
                drop_y=placement.y,
                cells=placement.cells,
            )
            match.moves.append(move)
            item.used = True
            match.updated_at = time()

            won = check_win(match.board(), mark)
            opponent = match.opponent_of(player_id)
            if won:
                match.status = "finished"
                match.winner_player_id = player_id
                match.turn_player_id = None
                logger.info("gridlink %s won by %s", match.id, player_id)
            elif opponent and match.pieces_left(opponent) > 0:
                match.turn_player_id = opponent
            elif match.pieces_left(player_id) == 0:
                match.status = "finished"
                match.turn_player_id = None
                logger.info("gridlink %s finished without a winner", match.id)
            return move, won, match


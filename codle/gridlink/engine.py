"""
GridLink board rules (no HTTP, no storage).

The board is indexed board[y][x]; row 0 is the top, pieces fall towards row 8.
A board is never changed in place: placing returns a new board, and the state
of a match is rebuilt by folding its moves over an empty board.

"Cannot place" is an ordinary outcome here (False / None), not an exception.
"""

from collections import deque
from dataclasses import dataclass
from functools import reduce
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from ..config import BOARD_SIZE
from ..types import Cell, Player
from .pieces import apply_transform, piece_base

Board = List[List[Optional[Player]]]

NEIGHBOURS = ((1, 0), (-1, 0), (0, 1), (0, -1))


@dataclass(frozen=True)
class Placement:
    x: int
    y: int
    cells: List[Cell]  # absolute board cells


def empty_board(size: int = BOARD_SIZE) -> Board:
    return [[None for _ in range(size)] for _ in range(size)]


def _in_bounds(board: Board, x: int, y: int) -> bool:
    return 0 <= y < len(board) and 0 <= x < len(board[y])


def can_place(board: Board, cells: Sequence[Cell], x0: int, y0: int) -> bool:
    for c in cells:
        x, y = x0 + c.x, y0 + c.y
        if not _in_bounds(board, x, y):
            return False
        if board[y][x] is not None:
            return False
    return True


def find_drop_y(board: Board, cells: Sequence[Cell], x0: int) -> Optional[int]:
    """
    Let the piece fall down column x0 from the top row.
    Contact uses the piece's own cells, so overhangs can rest on lower stacks.
    Returns None when the piece does not even fit at row 0.
    """
    if not can_place(board, cells, x0, 0):
        return None
    y = 0
    while can_place(board, cells, x0, y + 1):
        y += 1
    return y


def place_on_board(board: Board, abs_cells: Iterable[Cell], player: Player) -> Board:
    next_board = [list(row) for row in board]
    for c in abs_cells:
        # negative indexes would wrap around to the far edge
        if not _in_bounds(board, c.x, c.y):
            raise ValueError(f"Cell ({c.x}, {c.y}) is off the board")
        next_board[c.y][c.x] = player
    return next_board


def to_abs_cells(piece_id: str, rotation: int, mirrored: bool, x0: int, y0: int) -> List[Cell]:
    rel = apply_transform(piece_base(piece_id), rotation, mirrored)
    return [Cell(x0 + c.x, y0 + c.y) for c in rel]


def drop_piece(board: Board, piece_id: str, rotation: int, mirrored: bool, x0: int) -> Optional[Placement]:
    """Transform the piece, drop it in column x0 and report where it lands."""
    rel = apply_transform(piece_base(piece_id), rotation, mirrored)
    y0 = find_drop_y(board, rel, x0)
    if y0 is None:
        return None
    return Placement(x=x0, y=y0, cells=[Cell(x0 + c.x, y0 + c.y) for c in rel])


def board_from_moves(moves: Iterable[Tuple[Player, Sequence[Cell]]], size: int = BOARD_SIZE) -> Board:
    """Replay (player, absolute cells) moves, oldest first."""
    return reduce(
        lambda board, move: place_on_board(board, move[1], move[0]),
        moves,
        empty_board(size),
    )


def _connects(board: Board, player: Player, start: List[Cell], is_goal: Callable[[Cell], bool]) -> bool:
    # BFS over the player's own cells, 4-neighbourhood
    queue = deque(start)
    seen = set(start)
    while queue:
        cur = queue.popleft()
        if is_goal(cur):
            return True
        for dx, dy in NEIGHBOURS:
            nxt = Cell(cur.x + dx, cur.y + dy)
            if not _in_bounds(board, nxt.x, nxt.y):
                continue
            if board[nxt.y][nxt.x] != player or nxt in seen:
                continue
            seen.add(nxt)
            queue.append(nxt)
    return False


def check_win(board: Board, player: Player) -> bool:
    """Win = own cells linking left column to right column, or top row to bottom row."""
    last = len(board) - 1
    left = [Cell(0, y) for y in range(len(board)) if board[y][0] == player]
    top = [Cell(x, 0) for x in range(len(board[0])) if board[0][x] == player]

    left_right = bool(left) and _connects(board, player, left, lambda c: c.x == last)
    top_bottom = bool(top) and _connects(board, player, top, lambda c: c.y == last)
    return left_right or top_bottom

"""
GridLink pieces and their transforms.

Cells are (x, y) offsets; y grows downwards. Every transform re-normalizes its
output so the smallest x and y are 0, which makes (0, 0) the placement anchor.
"""

from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from ..errors import ValidationError
from ..types import Cell, PieceId


@dataclass(frozen=True)
class PieceDef:
    id: PieceId
    copies_per_player: int
    cells: Tuple[Cell, ...]


def _shape(*coords: Tuple[int, int]) -> Tuple[Cell, ...]:
    return tuple(Cell(x, y) for x, y in coords)


PIECES: List[PieceDef] = [
    PieceDef("S1", 2, _shape((0, 0))),
    PieceDef("I2", 2, _shape((0, 0), (1, 0))),
    PieceDef("Z4", 2, _shape((0, 0), (0, 1), (1, 1), (1, 2))),
    PieceDef("L3", 2, _shape((0, 0), (1, 0), (1, 1))),
    PieceDef("I3", 2, _shape((0, 0), (1, 0), (2, 0))),
    PieceDef("J4", 2, _shape((0, 0), (0, 1), (0, 2), (1, 0))),
    PieceDef("T4", 2, _shape((0, 0), (0, 1), (0, 2), (1, 1))),
]

PIECES_BY_ID: Dict[str, PieceDef] = {piece.id: piece for piece in PIECES}


def normalize(cells: Sequence[Cell]) -> List[Cell]:
    min_x = min(c.x for c in cells)
    min_y = min(c.y for c in cells)
    return [Cell(c.x - min_x, c.y - min_y) for c in cells]


def rotate90(cells: Sequence[Cell]) -> List[Cell]:
    """Quarter turn clockwise (screen coordinates)."""
    return normalize([Cell(-c.y, c.x) for c in cells])


def mirror_x(cells: Sequence[Cell]) -> List[Cell]:
    return normalize([Cell(-c.x, c.y) for c in cells])


def apply_transform(base: Sequence[Cell], rotation: int, mirrored: bool) -> List[Cell]:
    """
    Mirror first, then rotate. The order is part of the game: rotating first
    reaches a different cell set for asymmetric pieces.
    Any integer rotation works; it is reduced into 0..3.
    """
    out = list(base)
    if mirrored:
        out = mirror_x(out)
    for _ in range(rotation % 4):
        out = rotate90(out)
    return normalize(out)


def piece_base(piece_id: str) -> Tuple[Cell, ...]:
    piece = PIECES_BY_ID.get(piece_id)
    if piece is None:
        raise ValidationError(f"Unknown piece {piece_id}")
    return piece.cells


def starting_inventory() -> List[PieceId]:
    """Piece ids a player starts a match with, one entry per copy."""
    inventory: List[PieceId] = []
    for piece in PIECES:
        inventory.extend([piece.id] * piece.copies_per_player)
    return inventory

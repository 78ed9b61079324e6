"""
Pure game logic (no HTTP, no storage).

Codle / Duel feedback for each guess:
- bulls: right digit, right place   -> "green"
- cows:  right digit, wrong place   -> "yellow"
- the rest                          -> "gray"

Duplicates are allowed in secret and guess. A secret digit can back at most
one mark: greens claim their positions first, then yellows are handed out
left to right from whatever is left of the secret.

Box Match only reports how many colours sit in the right slot.
"""

import re
from collections import Counter
from dataclasses import dataclass
from typing import List, Sequence

from .config import BOX_DIFFICULTIES, CODE_LENGTH, box_palette_keys
from .errors import ValidationError
from .types import Marks


@dataclass(frozen=True)
class Evaluation:
    bulls: int
    cows: int
    marks: Marks


def validate_digits(value: object, length: int = CODE_LENGTH, what: str = "guess") -> str:
    # [0-9] rather than \d: \d also accepts non-ASCII digits
    if not isinstance(value, str) or not re.fullmatch(f"[0-9]{{{length}}}", value):
        raise ValidationError(f"Invalid {what}. Expected {length} digits string.")
    return value


def evaluate(secret: str, guess: str, length: int = CODE_LENGTH) -> Evaluation:
    """
    Example:
      secret = "1123"
      guess  = "1111"
      positions 0 and 1 are green; the leftover secret is {2, 3}, which has
      no 1s, so positions 2 and 3 are gray -> bulls=2, cows=0
    """
    validate_digits(secret, length, "secret")
    validate_digits(guess, length, "guess")

    marks: Marks = ["gray"] * length

    # 1. Greens; remember what the secret has left over
    leftover: List[str] = []
    open_positions: List[int] = []
    for i in range(length):
        if guess[i] == secret[i]:
            marks[i] = "green"
        else:
            leftover.append(secret[i])
            open_positions.append(i)

    # 2. Yellows, earlier positions claim the leftover supply first
    supply = Counter(leftover)
    for i in open_positions:
        if supply[guess[i]] > 0:
            marks[i] = "yellow"
            supply[guess[i]] -= 1

    return Evaluation(
        bulls=marks.count("green"),
        cows=marks.count("yellow"),
        marks=marks,
    )


def is_win(evaluation: Evaluation, length: int = CODE_LENGTH) -> bool:
    return evaluation.bulls == length


def correct_positions(guess: Sequence[str], secret: Sequence[str]) -> int:
    """How many slots hold the right colour (over the shared length)."""
    n = min(len(guess), len(secret))
    return sum(1 for i in range(n) if guess[i] == secret[i])


def validate_box_guess(guess: object, difficulty: str) -> List[str]:
    """
    A Box Match guess must:
    - be a list of colour keys as long as the tier
    - only use colours offered by the tier
    - use each colour once
    """
    if difficulty not in BOX_DIFFICULTIES:
        raise ValidationError("Invalid difficulty")

    length = BOX_DIFFICULTIES[difficulty].length
    if (
        not isinstance(guess, list)
        or len(guess) != length
        or any(not isinstance(key, str) for key in guess)
    ):
        raise ValidationError("Invalid guess")

    allowed = set(box_palette_keys(difficulty))
    if any(key not in allowed for key in guess):
        raise ValidationError("Guess contains invalid color for this difficulty")

    if len(set(guess)) != len(guess):
        raise ValidationError("No duplicates allowed in a guess")

    return list(guess)

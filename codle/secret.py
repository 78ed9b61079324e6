"""
Daily secrets (no HTTP, no storage).

Every secret is a pure function of (seed, date[, difficulty]): nothing is
stored ahead of time, the same inputs always rebuild the same secret, and
nobody can compute tomorrow's puzzle without the seed.
"""

from datetime import datetime, timezone
from typing import AbstractSet, List, Optional
from zoneinfo import ZoneInfo

from .config import BOX_DIFFICULTIES, CODE_LENGTH, GAME_TIMEZONE, box_palette_keys
from .errors import ConfigurationError, ValidationError
from .rng import Xorshift32, shuffle_in_place

# Share of days whose secret repeats a digit
DUPLICATE_PERCENT = 15

# How the duplicate days split (weights, out of their sum)
DUPLICATE_MIX = {"pair": 70, "two_pairs": 20, "triple": 10}


def game_date(now: Optional[datetime] = None, tz: str = GAME_TIMEZONE) -> str:
    """
    YYYY-MM-DD of `now` in the game timezone.
    Naive datetimes are taken as UTC so the host timezone never leaks in.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(ZoneInfo(tz)).date().isoformat()


def _require_seed(seed: Optional[str]) -> str:
    if not seed:
        raise ConfigurationError("Missing daily seed")
    return seed


def _distinct_digits(count: int, rng: Xorshift32, forbidden: AbstractSet[str] = frozenset()) -> List[str]:
    # rejection sampling: redraw until we have `count` new digits
    out: List[str] = []
    while len(out) < count:
        digit = str(rng.next_int(10))
        if digit in forbidden or digit in out:
            continue
        out.append(digit)
    return out


def _one_pair(length: int, rng: Xorshift32) -> List[str]:
    dup = str(rng.next_int(10))
    others = _distinct_digits(length - 2, rng, forbidden={dup})
    return shuffle_in_place([dup, dup] + others, rng.next_int)


def _two_pairs(rng: Xorshift32) -> List[str]:
    a, b = _distinct_digits(2, rng)
    return shuffle_in_place([a, a, b, b], rng.next_int)


def _triple(rng: Xorshift32) -> List[str]:
    a = str(rng.next_int(10))
    (b,) = _distinct_digits(1, rng, forbidden={a})
    return shuffle_in_place([a, a, a, b], rng.next_int)


def daily_secret(date: str, seed: Optional[str], length: int = CODE_LENGTH) -> str:
    """
    Codle secret for `date`.

    85% of days: all digits distinct, in draw order.
    15% of days: a repeated digit, split 70/20/10 between one pair, two pairs
    and a triple (the last two only exist for 4-digit codes; other lengths get
    one pair instead).
    """
    seed = _require_seed(seed)
    rng = Xorshift32.from_text(f"{seed}|{date}")

    roll = rng.next_percent()
    if roll >= DUPLICATE_PERCENT:
        return "".join(_distinct_digits(length, rng))

    total = sum(DUPLICATE_MIX.values())
    r = rng.next_int(total) + 1

    if r <= DUPLICATE_MIX["pair"] or length != 4:
        return "".join(_one_pair(length, rng))
    if r <= DUPLICATE_MIX["pair"] + DUPLICATE_MIX["two_pairs"]:
        return "".join(_two_pairs(rng))
    return "".join(_triple(rng))


def daily_box_secret_keys(date: str, difficulty: str, seed: Optional[str]) -> List[str]:
    """Box Match secret: the tier's palette prefix, shuffled. Always a permutation."""
    seed = _require_seed(seed)
    if difficulty not in BOX_DIFFICULTIES:
        raise ValidationError(f"Unknown difficulty: {difficulty!r}")

    rng = Xorshift32.from_text(f"{seed}|box|{difficulty}|{date}")
    keys = box_palette_keys(difficulty)
    return shuffle_in_place(keys, rng.next_scaled)

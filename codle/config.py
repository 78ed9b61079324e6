"""
Single place for:
- Reading settings from env (DAILY_SEED, APP_ENV, LOG_LEVEL)
- The puzzle constants every game mode depends on

Engines never read the environment themselves: the seed is read here and
passed to them explicitly.
"""

import os
from typing import Dict, List, NamedTuple, Optional

from dotenv import load_dotenv

from .errors import ConfigurationError

# 1) Load env vars from .env if present
load_dotenv()

APP_ENV = os.getenv("APP_ENV", "local")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# 2) Daily rotation happens at local midnight in this zone
GAME_TIMEZONE = "Europe/Rome"

# 3) Codle / Duel
CODE_LENGTH = 4
MAX_ATTEMPTS = 8
DUEL_MAX_ATTEMPTS = 6

# 4) Box Match
class BoxTier(NamedTuple):
    length: int
    label: str

BOX_DIFFICULTIES: Dict[str, BoxTier] = {
    "superEasy": BoxTier(4, "Very easy"),
    "easy": BoxTier(6, "Easy"),
    "medium": BoxTier(8, "Medium"),
    "hard": BoxTier(10, "Hard"),
}

class BoxColor(NamedTuple):
    key: str    # used by the logic and storage
    label: str
    hex: str

# Order matters: a tier of length N plays with the first N entries
BOX_PALETTE: List[BoxColor] = [
    BoxColor("red", "Red", "#ef4444"),
    BoxColor("green", "Green", "#10b981"),
    BoxColor("yellow", "Yellow", "#f59e0b"),
    BoxColor("purple", "Purple", "#8b5cf6"),
    BoxColor("white", "White", "#e5e7eb"),
    BoxColor("blue", "Blue", "#3b82f6"),
    BoxColor("pink", "Pink", "#ec4899"),
    BoxColor("orange", "Orange", "#fb923c"),
    BoxColor("teal", "Teal", "#14b8a6"),
    BoxColor("lime", "Lime", "#84cc16"),
]

# 5) GridLink
BOARD_SIZE = 9

# 6) Invite codes for Duel / GridLink matches (no 0/O, 1/I lookalikes)
INVITE_CODE_LENGTH = 6
INVITE_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
INVITE_CODE_RETRIES = 5


def box_palette_keys(difficulty: str) -> List[str]:
    """Palette keys available to a tier, in palette order."""
    length = BOX_DIFFICULTIES[difficulty].length
    return [color.key for color in BOX_PALETTE[:length]]


def read_daily_seed(environ: Optional[Dict[str, str]] = None) -> str:
    """
    Read DAILY_SEED. A missing seed is fatal: without it every daily secret
    would be guessable or random, so we never fall back to anything.
    """
    env = os.environ if environ is None else environ
    seed = env.get("DAILY_SEED")
    if not seed:
        raise ConfigurationError(
            "DAILY_SEED is not set. Add it to your environment or a local .env (not committed)."
        )
    return seed

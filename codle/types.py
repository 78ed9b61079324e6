"""
Labels for clarity.
"""

from typing import List, Literal, NamedTuple

Mark = Literal["green", "yellow", "gray"]
Marks = List[Mark]

# Box Match tiers
Difficulty = Literal["superEasy", "easy", "medium", "hard"]

# Duel: waiting -> secrets -> active -> finished
DuelStatus = Literal["waiting", "secrets", "active", "finished"]
# GridLink: waiting -> active -> finished
MatchStatus = Literal["waiting", "active", "finished"]

# GridLink
Player = Literal["P1", "P2"]
PieceId = Literal["S1", "I2", "Z4", "L3", "I3", "J4", "T4"]


class Cell(NamedTuple):
    x: int
    y: int

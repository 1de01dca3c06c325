from enum import Enum
from typing import Optional, Union

class Difficulty(str, Enum):
    """
    Question difficulty. Closed set; every value has an answer time budget.
    """
    EASY = "EASY"
    MEDIUM = "MEDIUM"
    HARD = "HARD"

# Answer time budget per difficulty, in seconds.
ALLOTTED_SECONDS = {
    Difficulty.EASY: 20,
    Difficulty.MEDIUM: 60,
    Difficulty.HARD: 120,
}
DEFAULT_ALLOTTED_SECONDS = ALLOTTED_SECONDS[Difficulty.EASY]

TIME_UP_FEEDBACK = "Time up! No answer submitted. Automatically advanced."

def parse_difficulty(value: Union[str, Difficulty, None]) -> Optional[Difficulty]:
    """Map a free-form difficulty label to the enum, None if unrecognized."""
    if isinstance(value, Difficulty):
        return value
    if not value:
        return None
    try:
        return Difficulty(str(value).strip().upper())
    except ValueError:
        return None

def allotted_seconds(difficulty: Union[str, Difficulty, None]) -> int:
    """Answer time budget. Unknown difficulty gets the EASY budget."""
    parsed = parse_difficulty(difficulty)
    if parsed is None:
        return DEFAULT_ALLOTTED_SECONDS
    return ALLOTTED_SECONDS[parsed]

def difficulty_for_slot(index: int) -> Difficulty:
    """Slots 0-1 are EASY, 2-3 MEDIUM, the rest HARD."""
    if index < 2:
        return Difficulty.EASY
    if index < 4:
        return Difficulty.MEDIUM
    return Difficulty.HARD

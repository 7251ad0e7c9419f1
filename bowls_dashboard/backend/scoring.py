# backend/scoring.py
import math
from typing import Iterable, Optional, Tuple

import numpy as np # type: ignore

DRAW = "Draw"


def running_total(previous: Optional[int], delta: int) -> int:
    """Cumulative score after an end; previous is None before the first end."""
    return (previous or 0) + delta


def determine_winner(score_a: int, score_b: int, name_a: str = "A", name_b: str = "B") -> str:
    """
    Returns the name of the side with the strictly higher score, or "Draw".
    Equal scores (including 0-0 with no ends played) are a draw.
    """
    if score_a > score_b:
        return name_a
    if score_b > score_a:
        return name_b
    return DRAW


def winning_side(score_a: int, score_b: int) -> Optional[str]:
    """Side key ("A" or "B") of the strictly higher score, None for a draw."""
    if score_a > score_b:
        return "A"
    if score_b > score_a:
        return "B"
    return None


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def success_percentage(successful: int, attempts: int) -> float:
    if attempts <= 0:
        return 0.0
    return successful / attempts * 100


def mean_and_stddev(values: Iterable[int]) -> Tuple[float, float]:
    """Population mean and standard deviation; (0.0, 0.0) for no values."""
    arr = np.asarray(list(values), dtype=np.float64)
    if arr.size == 0:
        return 0.0, 0.0
    return float(arr.mean()), float(arr.std(ddof=0))

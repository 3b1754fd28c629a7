"""
SM-2 (SuperMemo 2) spaced repetition calculator.

Pure functions, no database access. Callers are responsible for passing a
score in 0..5 and an easiness factor of at least the configured minimum.
"""
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from lexis.models.enums import FlashcardItemStage
from lexis.utils.time_utils import utc_now


@dataclass(frozen=True)
class SM2Parameters:
    """Constants of the SM-2 algorithm."""
    min_easiness_factor: float = 1.31  # Floor kept above the classic 1.3
    passing_score: int = 3
    first_interval: int = 1  # Days after the first successful recall
    second_interval: int = 6  # Days after the second consecutive successful recall
    max_interval: int = 36500  # Upper bound on any interval, about a hundred years


DEFAULT_SM2_PARAMETERS = SM2Parameters()

MIN_SCORE = 0
MAX_SCORE = 5


@dataclass(frozen=True)
class SM2State:
    """Spaced repetition state of a single repetition record."""
    easiness_factor: float
    repetitions: int
    next_interval: int


@dataclass(frozen=True)
class SM2Result:
    """New state produced by one SM-2 step."""
    easiness_factor: float
    repetitions: int
    next_interval: int
    date_last_rep: datetime
    date_next_rep: datetime
    stage: FlashcardItemStage


def calculate_next_interval(
    repetitions: int,
    current_interval: int,
    easiness_factor: float,
    params: SM2Parameters = DEFAULT_SM2_PARAMETERS,
) -> int:
    """
    Calculate the interval after a successful recall.

    Args:
        repetitions: Consecutive successful recalls before this one
        current_interval: Current interval in days
        easiness_factor: Easiness factor after this review's update

    Returns:
        New interval in days (halves round up), capped at params.max_interval
    """
    if repetitions == 0:
        return params.first_interval
    if repetitions == 1:
        return params.second_interval
    return min(math.floor(current_interval * easiness_factor + 0.5), params.max_interval)


def calculate_easiness_factor(
    current_ef: float,
    score: int,
    params: SM2Parameters = DEFAULT_SM2_PARAMETERS,
) -> float:
    """
    EF' = EF + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02)), floored at the minimum.
    """
    new_ef = current_ef + (0.1 - (5 - score) * (0.08 + (5 - score) * 0.02))
    return max(new_ef, params.min_easiness_factor)


def determine_stage(interval: int) -> FlashcardItemStage:
    """An item is passed once it is scheduled at least one day ahead."""
    return FlashcardItemStage.PASSED if interval >= 1 else FlashcardItemStage.LEARNING


def compute_next(
    state: SM2State,
    score: int,
    params: SM2Parameters = DEFAULT_SM2_PARAMETERS,
    now: Optional[datetime] = None,
) -> SM2Result:
    """
    Calculate the next spaced repetition state using SM-2.

    Score >= passing score: the item was recalled, the interval grows
    (1 day, 6 days, then previous interval x EF). Below the passing score the
    progression resets to zero. The easiness factor is updated in both cases.

    Args:
        state: Current repetition state
        score: Recall quality (0 = blackout, 5 = perfect)
        params: SM-2 constants
        now: Review time (defaults to current UTC time)

    Returns:
        SM2Result with the new state, review dates and suggested item stage
    """
    easiness_factor = calculate_easiness_factor(state.easiness_factor, score, params)

    if score >= params.passing_score:
        # Interval growth uses the freshly updated easiness factor
        next_interval = calculate_next_interval(
            state.repetitions, state.next_interval, easiness_factor, params
        )
        repetitions = state.repetitions + 1
    else:
        repetitions = 0
        next_interval = 0

    date_last_rep = now or utc_now()
    date_next_rep = date_last_rep + timedelta(days=next_interval)

    return SM2Result(
        easiness_factor=easiness_factor,
        repetitions=repetitions,
        next_interval=next_interval,
        date_last_rep=date_last_rep,
        date_next_rep=date_next_rep,
        stage=determine_stage(next_interval),
    )

from datetime import datetime, timedelta

import pytest

from lexis.models.enums import FlashcardItemStage
from lexis.services.sm2_service import (
    SM2State,
    SM2Parameters,
    compute_next,
    calculate_easiness_factor,
    calculate_next_interval,
    determine_stage,
)

NOW = datetime(2025, 3, 10, 9, 30)


def test_first_success_schedules_one_day():
    result = compute_next(SM2State(2.5, 0, 0), 4, now=NOW)
    assert result.next_interval == 1
    assert result.repetitions == 1
    assert result.stage == FlashcardItemStage.PASSED
    assert result.easiness_factor == pytest.approx(2.5)


def test_second_success_schedules_six_days():
    result = compute_next(SM2State(2.5, 1, 1), 4, now=NOW)
    assert result.next_interval == 6
    assert result.repetitions == 2


def test_third_success_uses_updated_easiness_factor():
    result = compute_next(SM2State(2.5, 2, 6), 5, now=NOW)
    assert result.easiness_factor == pytest.approx(2.6)
    assert result.next_interval == round(6 * 2.6)
    assert result.next_interval == 16
    assert result.repetitions == 3


def test_interval_rounds_half_up():
    assert calculate_next_interval(2, 5, 2.5) == 13


@pytest.mark.parametrize("score", [0, 1, 2])
def test_failure_resets_progress(score):
    result = compute_next(SM2State(2.7, 4, 30), score, now=NOW)
    assert result.repetitions == 0
    assert result.next_interval == 0
    assert result.stage == FlashcardItemStage.LEARNING
    assert result.date_next_rep == NOW


def test_dates_follow_interval():
    result = compute_next(SM2State(2.5, 1, 1), 3, now=NOW)
    assert result.date_last_rep == NOW
    assert result.date_next_rep == NOW + timedelta(days=result.next_interval)


@pytest.mark.parametrize("score", range(0, 6))
@pytest.mark.parametrize("start_ef", [1.31, 1.4, 2.5, 3.2])
def test_easiness_factor_never_below_floor(score, start_ef):
    assert calculate_easiness_factor(start_ef, score) >= 1.31


def test_easiness_factor_formula():
    assert calculate_easiness_factor(2.5, 5) == pytest.approx(2.6)
    assert calculate_easiness_factor(2.5, 3) == pytest.approx(2.36)
    assert calculate_easiness_factor(2.5, 0) == pytest.approx(1.7)


def test_custom_floor_is_respected():
    params = SM2Parameters(min_easiness_factor=2.0)
    result = compute_next(SM2State(2.0, 0, 0), 0, params=params, now=NOW)
    assert result.easiness_factor == 2.0


def test_stage_from_interval():
    assert determine_stage(0) == FlashcardItemStage.LEARNING
    assert determine_stage(1) == FlashcardItemStage.PASSED


def test_interval_is_capped():
    result = compute_next(SM2State(4.5, 30, 2_900_240), 5, now=NOW)
    assert result.next_interval == SM2Parameters().max_interval
    assert result.date_next_rep == NOW + timedelta(days=36500)


def test_custom_interval_cap():
    assert calculate_next_interval(5, 100, 2.5, SM2Parameters(max_interval=180)) == 180

from datetime import timedelta

import pytest
from sqlmodel import select

from lexis.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from lexis.models.models import (
    CEFRLevel,
    FlashcardItem,
    FlashcardItemStage,
    FlashcardItemStatus,
    FlashcardSession,
    Repetition,
    SessionStatus,
)
from lexis.services import flashcard_session_service
from lexis.utils.time_utils import utc_now

from conftest import make_user, make_words


def test_new_user_gets_only_new_items(db_session):
    user = make_user(db_session, daily_new_limit=5, daily_review_limit=50)
    make_words(db_session, CEFRLevel.A1, 20)

    flashcard_session = flashcard_session_service.create_session(db_session, user.id, "random")

    statuses = [item.status for item in flashcard_session.items]
    assert statuses.count(FlashcardItemStatus.NEW) == 5
    assert statuses.count(FlashcardItemStatus.REVIEW) == 0
    assert all(item.stage == FlashcardItemStage.REVIEW for item in flashcard_session.items)
    repetitions = db_session.exec(select(Repetition).where(Repetition.user_id == user.id)).all()
    assert len(repetitions) == 5


def test_due_reviews_come_first_and_fill_capacity(db_session):
    user = make_user(db_session, daily_new_limit=10, daily_review_limit=4)
    words = make_words(db_session, CEFRLevel.A1, 10)
    for word in words[:3]:
        db_session.add(Repetition(user_id=user.id, word_id=word.id, date_next_rep=utc_now() - timedelta(days=1)))
    db_session.commit()

    flashcard_session = flashcard_session_service.create_session(db_session, user.id, "random")

    stats = flashcard_session_service.calculate_session_stats(flashcard_session.items)
    assert stats["review_cards"] == 3
    assert stats["new_cards"] == 1
    assert stats["total_cards"] == 4


def test_review_limit_reached_means_no_new_words(db_session):
    user = make_user(db_session, daily_new_limit=10, daily_review_limit=2)
    words = make_words(db_session, CEFRLevel.A1, 6)
    for word in words[:3]:
        db_session.add(Repetition(user_id=user.id, word_id=word.id, date_next_rep=utc_now() - timedelta(days=1)))
    db_session.commit()

    flashcard_session = flashcard_session_service.create_session(db_session, user.id, "random")

    assert len(flashcard_session.items) == 2
    assert all(item.status == FlashcardItemStatus.REVIEW for item in flashcard_session.items)


def test_level_strategy_picks_matching_words(db_session):
    user = make_user(db_session, learning_strategy="level_c1")
    make_words(db_session, CEFRLevel.A1, 5)
    make_words(db_session, CEFRLevel.C1, 3)

    flashcard_session = flashcard_session_service.start_session(db_session, user.id)

    assert flashcard_session.type == "level_c1"
    levels = {item.repetition.word.level for item in flashcard_session.items}
    assert levels == {CEFRLevel.C1}


def test_start_session_is_idempotent_same_day(db_session, user):
    make_words(db_session, CEFRLevel.A2, 5)

    first = flashcard_session_service.start_session(db_session, user.id)
    second = flashcard_session_service.start_session(db_session, user.id)

    assert first.id == second.id
    assert len(db_session.exec(select(FlashcardSession)).all()) == 1


def test_start_session_returns_completed_session_of_today(db_session, user):
    first = flashcard_session_service.start_session(db_session, user.id)
    flashcard_session_service.finish_session(db_session, user.id)

    again = flashcard_session_service.start_session(db_session, user.id)

    assert again.id == first.id
    assert again.status == SessionStatus.COMPLETED


def test_start_session_closes_stale_session(db_session, user):
    stale = FlashcardSession(user_id=user.id, type="random", started_at=utc_now() - timedelta(days=1))
    db_session.add(stale)
    db_session.commit()

    fresh = flashcard_session_service.start_session(db_session, user.id)
    db_session.refresh(stale)

    assert fresh.id != stale.id
    assert fresh.status == SessionStatus.ACTIVE
    assert stale.status == SessionStatus.COMPLETED
    assert stale.ended_at is not None


def test_send_score_passes_item(db_session, user):
    make_words(db_session, CEFRLevel.A1, 1)
    flashcard_session = flashcard_session_service.start_session(db_session, user.id)
    item = flashcard_session.items[0]

    updated = flashcard_session_service.send_score(db_session, item.id, 5, user_id=user.id)

    repetition = db_session.get(Repetition, updated.repetition_id)
    assert updated.stage == FlashcardItemStage.PASSED
    assert repetition.repetitions == 1
    assert repetition.next_interval == 1
    assert repetition.easiness_factor == pytest.approx(2.6)
    assert repetition.date_last_rep is not None
    assert repetition.date_next_rep == repetition.date_last_rep + timedelta(days=1)


def test_repeated_scores_keep_interval_bounded(db_session, user):
    make_words(db_session, CEFRLevel.A1, 1)
    item = flashcard_session_service.start_session(db_session, user.id).items[0]

    for _ in range(20):
        flashcard_session_service.send_score(db_session, item.id, 5)

    repetition = db_session.get(Repetition, item.repetition_id)
    assert repetition.repetitions == 20
    assert repetition.next_interval == 36500
    assert repetition.date_next_rep == repetition.date_last_rep + timedelta(days=36500)


def test_send_score_failure_moves_item_to_learning(db_session, user):
    make_words(db_session, CEFRLevel.A1, 1)
    item = flashcard_session_service.start_session(db_session, user.id).items[0]

    updated = flashcard_session_service.send_score(db_session, item.id, 1)

    assert updated.stage == FlashcardItemStage.LEARNING
    assert db_session.get(Repetition, updated.repetition_id).next_interval == 0


@pytest.mark.parametrize("score", [-1, 6])
def test_send_score_rejects_out_of_range(db_session, user, score):
    make_words(db_session, CEFRLevel.A1, 1)
    item = flashcard_session_service.start_session(db_session, user.id).items[0]

    with pytest.raises(ValidationError):
        flashcard_session_service.send_score(db_session, item.id, score)


def test_send_score_missing_item(db_session):
    with pytest.raises(NotFoundError):
        flashcard_session_service.send_score(db_session, 12345, 4)


def test_send_score_other_users_item(db_session, user):
    intruder = make_user(db_session, email="intruder@example.com")
    make_words(db_session, CEFRLevel.A1, 1)
    item = flashcard_session_service.start_session(db_session, user.id).items[0]

    with pytest.raises(AuthorizationError):
        flashcard_session_service.send_score(db_session, item.id, 4, user_id=intruder.id)


def test_send_score_item_of_another_session(db_session, user):
    make_words(db_session, CEFRLevel.A1, 1)
    flashcard_session = flashcard_session_service.start_session(db_session, user.id)
    item = flashcard_session.items[0]

    with pytest.raises(NotFoundError):
        flashcard_session_service.send_score(
            db_session, item.id, 4, user_id=user.id, flashcard_session_id=flashcard_session.id + 1
        )


def test_finish_requires_all_items_passed(db_session, user):
    make_words(db_session, CEFRLevel.A1, 2)
    items = flashcard_session_service.start_session(db_session, user.id).items
    flashcard_session_service.send_score(db_session, items[0].id, 5)

    with pytest.raises(ValidationError):
        flashcard_session_service.finish_session(db_session, user.id)

    flashcard_session_service.send_score(db_session, items[1].id, 4)
    finished = flashcard_session_service.finish_session(db_session, user.id)

    assert finished.status == SessionStatus.COMPLETED
    assert finished.ended_at is not None


def test_finish_is_idempotent(db_session, user):
    flashcard_session_service.start_session(db_session, user.id)
    first = flashcard_session_service.finish_session(db_session, user.id)
    ended_at = first.ended_at

    second = flashcard_session_service.finish_session(db_session, user.id)

    assert second.id == first.id
    assert second.ended_at == ended_at


def test_finish_without_session(db_session, user):
    with pytest.raises(NotFoundError):
        flashcard_session_service.finish_session(db_session, user.id)


def test_delete_session_removes_items(db_session, user):
    make_words(db_session, CEFRLevel.A1, 3)
    flashcard_session = flashcard_session_service.start_session(db_session, user.id)

    flashcard_session_service.delete_session(db_session, flashcard_session.id, user.id)

    assert db_session.exec(select(FlashcardItem)).all() == []
    with pytest.raises(NotFoundError):
        flashcard_session_service.get_session(db_session, flashcard_session.id, user.id)


def test_calculate_session_stats():
    items = [
        FlashcardItem(session_id=1, repetition_id=1, status=FlashcardItemStatus.NEW, stage=FlashcardItemStage.PASSED),
        FlashcardItem(session_id=1, repetition_id=2, status=FlashcardItemStatus.REVIEW, stage=FlashcardItemStage.LEARNING),
        FlashcardItem(session_id=1, repetition_id=3, status=FlashcardItemStatus.REVIEW, stage=FlashcardItemStage.REVIEW),
    ]

    assert flashcard_session_service.calculate_session_stats(items) == {
        "new_cards": 1,
        "review_cards": 2,
        "repeat_cards": 1,
        "mastered_cards": 1,
        "total_cards": 3,
    }

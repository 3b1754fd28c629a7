from datetime import timedelta

import pydantic
import pytest
from sqlmodel import select

from lexis.core.exceptions import (
    AuthorizationError,
    InsufficientDataError,
    NotFoundError,
    UpstreamError,
    ValidationError,
)
from lexis.models.models import CEFRLevel, QuizItem, QuizPackage, QuizSession, SessionStatus
from lexis.schemas.quiz import PackageAnswer
from lexis.services.quiz_session_service import (
    QuizConfig,
    QuizSessionService,
    adapt_level_index,
    calculate_adaptive_level,
    calculate_package_score,
    parse_level_range,
)
from lexis.utils.time_utils import utc_now

from conftest import ScriptedGenerator, make_user, make_words

CONFIG = QuizConfig()


def seed_catalog(session, per_level=6):
    for level in CEFRLevel:
        make_words(session, level, per_level)


def answer_package(service, session, user_id, package, correct):
    """Answer `correct` items with 'A' (right) and the rest with 'C' (wrong)."""
    answers = [
        PackageAnswer(item_id=item.id, answer="A" if i < correct else "C")
        for i, item in enumerate(package.items)
    ]
    return service.submit_package(session, user_id, package.id, answers)


def package_at(level, correct, total):
    package = QuizPackage(session_id=1, package="package-1", sequence=1, level=level)
    package.items = [
        QuizItem(
            package_id=1, word_id=1, type="matching", question="q",
            correct_answer="A", answer_a="a", answer_b="b", answer_c="c",
            user_answer="A" if i < correct else "B",
        )
        for i in range(total)
    ]
    return package


def test_parse_level_range():
    assert parse_level_range("B1-B2") == [CEFRLevel.B1, CEFRLevel.B2]
    assert parse_level_range("a1-zz") == [CEFRLevel.A1]
    assert parse_level_range("") == []


def test_adaptive_level():
    assert calculate_adaptive_level(package_at("A1-A2", 8, 10), CONFIG) == "B1-B2"
    assert calculate_adaptive_level(package_at("C1-C2", 9, 10), CONFIG) == "C1-C2"
    assert calculate_adaptive_level(package_at("B1-B2", 3, 10), CONFIG) == "A1-A2"
    assert calculate_adaptive_level(package_at("A1-A2", 1, 10), CONFIG) == "A1-A2"
    assert calculate_adaptive_level(package_at("B1-B2", 6, 10), CONFIG) == "B1-B2"


def test_adaptive_thresholds_are_exclusive():
    assert adapt_level_index(1, 0.75, CONFIG) == 1
    assert adapt_level_index(1, 0.50, CONFIG) == 1
    assert adapt_level_index(1, 0.76, CONFIG) == 2
    assert adapt_level_index(1, 0.49, CONFIG) == 0


def test_unknown_level_adapts_from_middle():
    assert calculate_adaptive_level(package_at("X9", 10, 10), CONFIG) == "C1-C2"
    assert calculate_adaptive_level(package_at(None, 0, 10), CONFIG) == "A1-A2"


def test_empty_package_scores_zero():
    assert calculate_package_score([]) == 0.0


def test_create_session_with_first_package(db_session, user):
    seed_catalog(db_session, per_level=8)
    generator = ScriptedGenerator()
    service = QuizSessionService(generator, CONFIG)

    quiz_session = service.create_session(db_session, user.id)

    assert quiz_session.status == SessionStatus.ACTIVE
    assert quiz_session.type == "default"
    assert len(quiz_session.packages) == 1
    package = quiz_session.packages[0]
    assert package.package == "package-1"
    assert package.sequence == 1
    assert package.level == "B1-B2"
    assert len(package.items) == 12
    words, level = generator.calls[0]
    assert level == "B1-B2"
    assert {w.level for w in words} <= {CEFRLevel.B1, CEFRLevel.B2}


def test_short_catalog_still_generates(db_session, user):
    make_words(db_session, CEFRLevel.B1, 3)
    service = QuizSessionService(ScriptedGenerator(), CONFIG)

    quiz_session = service.create_session(db_session, user.id)

    assert len(quiz_session.packages[0].items) == 3


def test_empty_catalog_raises_without_calling_generator(db_session, user):
    make_words(db_session, CEFRLevel.A1, 5)
    generator = ScriptedGenerator()
    service = QuizSessionService(generator, CONFIG)

    with pytest.raises(InsufficientDataError):
        service.create_session(db_session, user.id)

    assert generator.calls == []
    assert db_session.exec(select(QuizSession)).all() == []
    assert db_session.exec(select(QuizPackage)).all() == []


def test_savepoint_retry_keeps_package_and_one_set_of_items(db_session, user):
    seed_catalog(db_session)
    generator = ScriptedGenerator("broken", "ok")
    service = QuizSessionService(generator, CONFIG)

    quiz_session = service.create_session(db_session, user.id)

    assert len(generator.calls) == 2
    packages = db_session.exec(select(QuizPackage)).all()
    assert len(packages) == 1
    items = db_session.exec(select(QuizItem)).all()
    assert len(items) == 12
    assert all(item.question for item in items)
    assert quiz_session.packages[0].id == packages[0].id


@pytest.mark.parametrize("failure", ["empty", "unknown_word", UpstreamError("timeout")])
def test_failed_attempt_is_retried(db_session, user, failure):
    seed_catalog(db_session)
    generator = ScriptedGenerator(failure, "ok")
    service = QuizSessionService(generator, CONFIG)

    quiz_session = service.create_session(db_session, user.id)

    assert len(generator.calls) == 2
    assert len(quiz_session.packages[0].items) == 12


def test_exhausted_retries_leave_nothing_behind(db_session, user):
    seed_catalog(db_session)
    generator = ScriptedGenerator("broken", UpstreamError("down"), "ok")
    service = QuizSessionService(generator, CONFIG)

    with pytest.raises(UpstreamError):
        service.create_session(db_session, user.id)

    assert len(generator.calls) == 2
    assert db_session.exec(select(QuizSession)).all() == []
    assert db_session.exec(select(QuizPackage)).all() == []
    assert db_session.exec(select(QuizItem)).all() == []


def test_submit_package_scores_answers(db_session, user):
    seed_catalog(db_session)
    service = QuizSessionService(ScriptedGenerator(), CONFIG)
    package = service.create_session(db_session, user.id).packages[0]

    result = answer_package(service, db_session, user.id, package, correct=9)

    assert result == {"package_id": package.id, "correct_count": 9, "total": 12, "score_percentage": 75}


def test_submit_package_skips_unknown_items(db_session, user):
    seed_catalog(db_session)
    service = QuizSessionService(ScriptedGenerator(), CONFIG)
    package = service.create_session(db_session, user.id).packages[0]
    first_item = package.items[0]

    result = service.submit_package(
        db_session,
        user.id,
        package.id,
        [PackageAnswer(item_id=first_item.id, answer="a"), PackageAnswer(item_id=424242, answer="A")],
    )

    assert result["correct_count"] == 1
    assert result["total"] == 12
    db_session.refresh(first_item)
    assert first_item.user_answer == "A"


def test_submit_package_checks_owner(db_session, user):
    intruder = make_user(db_session, email="intruder@example.com")
    seed_catalog(db_session)
    service = QuizSessionService(ScriptedGenerator(), CONFIG)
    package = service.create_session(db_session, user.id).packages[0]

    with pytest.raises(AuthorizationError):
        service.submit_package(db_session, intruder.id, package.id, [])
    with pytest.raises(NotFoundError):
        service.submit_package(db_session, user.id, 999, [])


def test_next_package_requires_answers(db_session, user):
    seed_catalog(db_session)
    service = QuizSessionService(ScriptedGenerator(), CONFIG)
    service.create_session(db_session, user.id)

    with pytest.raises(ValidationError):
        service.generate_next_package(db_session, user.id)


def test_next_package_levels_up_after_high_score(db_session, user):
    seed_catalog(db_session)
    generator = ScriptedGenerator()
    service = QuizSessionService(generator, CONFIG)
    package = service.create_session(db_session, user.id).packages[0]
    answer_package(service, db_session, user.id, package, correct=12)

    next_package = service.generate_next_package(db_session, user.id)

    assert next_package.package == "package-2"
    assert next_package.sequence == 2
    assert next_package.level == "C1-C2"
    assert generator.calls[-1][1] == "C1-C2"


def test_next_package_levels_down_after_low_score(db_session, user):
    seed_catalog(db_session)
    service = QuizSessionService(ScriptedGenerator(), CONFIG)
    package = service.create_session(db_session, user.id).packages[0]
    answer_package(service, db_session, user.id, package, correct=2)

    assert service.generate_next_package(db_session, user.id).level == "A1-A2"


def test_full_session_and_finish(db_session, user):
    seed_catalog(db_session)
    service = QuizSessionService(ScriptedGenerator(), CONFIG)
    package = service.create_session(db_session, user.id).packages[0]

    answer_package(service, db_session, user.id, package, correct=6)
    with pytest.raises(ValidationError):
        service.finish_session(db_session, user.id)

    for _ in range(2):
        package = service.generate_next_package(db_session, user.id)
        answer_package(service, db_session, user.id, package, correct=6)

    with pytest.raises(ValidationError):
        service.generate_next_package(db_session, user.id)

    finished = service.finish_session(db_session, user.id)
    assert finished.status == SessionStatus.COMPLETED
    assert finished.ended_at is not None
    assert [p.sequence for p in finished.packages] == [1, 2, 3]

    with pytest.raises(NotFoundError):
        service.finish_session(db_session, user.id)


def test_finish_requires_last_package_answered(db_session, user):
    seed_catalog(db_session)
    service = QuizSessionService(ScriptedGenerator(), CONFIG)
    package = service.create_session(db_session, user.id).packages[0]
    answer_package(service, db_session, user.id, package, correct=6)
    package = service.generate_next_package(db_session, user.id)
    answer_package(service, db_session, user.id, package, correct=6)
    service.generate_next_package(db_session, user.id)

    with pytest.raises(ValidationError):
        service.finish_session(db_session, user.id)


def test_failed_next_package_keeps_session(db_session, user):
    seed_catalog(db_session)
    generator = ScriptedGenerator()
    service = QuizSessionService(generator, CONFIG)
    quiz_session = service.create_session(db_session, user.id)
    answer_package(service, db_session, user.id, quiz_session.packages[0], correct=6)
    generator.steps = ["broken", "broken"]

    with pytest.raises(UpstreamError):
        service.generate_next_package(db_session, user.id)

    assert len(db_session.exec(select(QuizPackage)).all()) == 1
    assert db_session.get(QuizSession, quiz_session.id).status == SessionStatus.ACTIVE


def test_next_package_without_active_session(db_session, user):
    service = QuizSessionService(ScriptedGenerator(), CONFIG)
    with pytest.raises(NotFoundError):
        service.generate_next_package(db_session, user.id)


def test_start_session_resumes_active_session_of_today(db_session, user):
    seed_catalog(db_session)
    generator = ScriptedGenerator()
    service = QuizSessionService(generator, CONFIG)

    first = service.start_session(db_session, user.id)
    second = service.start_session(db_session, user.id)

    assert first.id == second.id
    assert len(generator.calls) == 1


def test_start_session_after_completed_session_creates_new(db_session, user):
    seed_catalog(db_session)
    service = QuizSessionService(ScriptedGenerator(), CONFIG)
    first = service.start_session(db_session, user.id)
    first.status = SessionStatus.COMPLETED
    db_session.add(first)
    db_session.commit()

    second = service.start_session(db_session, user.id)

    assert second.id != first.id
    assert second.status == SessionStatus.ACTIVE


def test_start_session_closes_stale_active_session(db_session, user):
    seed_catalog(db_session)
    stale = QuizSession(user_id=user.id, type="default", started_at=utc_now() - timedelta(days=2))
    db_session.add(stale)
    db_session.commit()
    service = QuizSessionService(ScriptedGenerator(), CONFIG)

    fresh = service.start_session(db_session, user.id)
    db_session.refresh(stale)

    assert fresh.id != stale.id
    assert stale.status == SessionStatus.COMPLETED
    assert stale.ended_at is not None


def test_config_from_settings():
    class FakeSettings:
        quiz_words_per_package = 5
        quiz_max_packages = 4
        quiz_max_generation_attempts = 3

    config = QuizConfig.from_settings(FakeSettings())

    assert config.words_per_package == 5
    assert config.max_packages == 4
    assert config.max_generation_attempts == 3
    assert config.default_level == "B1-B2"


def test_package_answer_is_normalized_letter():
    assert PackageAnswer(item_id=1, answer=" b ").answer == "B"
    for bad in ["", "  ", "D", "AB"]:
        with pytest.raises(pydantic.ValidationError):
            PackageAnswer(item_id=1, answer=bad)

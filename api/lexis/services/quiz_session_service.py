"""
Quiz session service.

A quiz session is a sequence of up to `max_packages` packages of AI-generated
multiple-choice questions. The CEFR range of each package after the first
adapts to the learner's score on the previous one.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional, Dict, Any, Sequence, Tuple
from sqlmodel import Session, select
from sqlalchemy import func

from lexis.core.exceptions import (
    AuthorizationError,
    InsufficientDataError,
    NotFoundError,
    UpstreamError,
    ValidationError,
)
from lexis.models.models import (
    QuizSession,
    QuizPackage,
    QuizItem,
    Word,
    CEFRLevel,
    SessionStatus,
)
from lexis.schemas.quiz import PackageAnswer
from lexis.services.quiz_generator_service import GeneratedQuestion, QuestionGenerator
from lexis.utils.time_utils import utc_now, is_same_day

logger = logging.getLogger(__name__)

DEFAULT_SESSION_TYPE = "default"


@dataclass(frozen=True)
class QuizConfig:
    """Quiz engine configuration."""
    words_per_package: int = 12
    max_packages: int = 3
    max_generation_attempts: int = 2
    default_level: str = "B1-B2"
    levels: Tuple[str, ...] = ("A1-A2", "B1-B2", "C1-C2")  # Ordered by difficulty
    level_up_threshold: float = 0.75
    level_down_threshold: float = 0.50

    @classmethod
    def from_settings(cls, settings) -> "QuizConfig":
        return cls(
            words_per_package=settings.quiz_words_per_package,
            max_packages=settings.quiz_max_packages,
            max_generation_attempts=settings.quiz_max_generation_attempts,
        )


def package_name(sequence: int) -> str:
    return f"package-{sequence}"


def parse_level_range(level: str) -> List[CEFRLevel]:
    """'B1-B2' -> [CEFRLevel.B1, CEFRLevel.B2]; unknown codes are dropped."""
    levels = []
    for code in (level or "").split("-"):
        code = code.strip().upper()
        if code in CEFRLevel.__members__:
            levels.append(CEFRLevel(code))
    return levels


def calculate_package_score(items: Sequence[QuizItem]) -> float:
    """Fraction of items answered correctly, 0 for an empty package."""
    if not items:
        return 0.0
    correct = sum(1 for item in items if item.user_answer == item.correct_answer)
    return correct / len(items)


def adapt_level_index(current_index: int, score: float, config: QuizConfig) -> int:
    """Move one level up above the upper threshold, one down below the lower one."""
    if score > config.level_up_threshold:
        return min(current_index + 1, len(config.levels) - 1)
    if score < config.level_down_threshold:
        return max(current_index - 1, 0)
    return current_index


def calculate_adaptive_level(package: QuizPackage, config: QuizConfig) -> str:
    """Level range for the package following `package`."""
    score = calculate_package_score(package.items)
    if package.level in config.levels:
        current_index = config.levels.index(package.level)
    else:
        current_index = 1

    next_level = config.levels[adapt_level_index(current_index, score, config)]
    logger.debug(f"Adaptive level: score={score * 100:.0f}%, {package.level} -> {next_level}")
    return next_level


def is_package_completed(package: QuizPackage) -> bool:
    """True when every item of the package has an answer."""
    return all(item.user_answer is not None for item in package.items)


class QuizSessionService:
    """
    Quiz session lifecycle: creation, package generation with retries,
    answer submission and completion.

    Args:
        generator: Question generator (AI-backed in production)
        config: Engine configuration
    """

    def __init__(self, generator: QuestionGenerator, config: Optional[QuizConfig] = None):
        self.generator = generator
        self.config = config or QuizConfig()

    # Queries

    def list_sessions(self, session: Session, user_id: int) -> List[QuizSession]:
        return list(session.exec(
            select(QuizSession)
            .where(QuizSession.user_id == user_id)
            .order_by(QuizSession.started_at.desc(), QuizSession.id.desc())  # type: ignore
        ).all())

    def get_session(self, session: Session, session_id: int, user_id: int) -> QuizSession:
        quiz_session = session.get(QuizSession, session_id)
        if not quiz_session or quiz_session.user_id != user_id:
            raise NotFoundError(f"Quiz session with id {session_id} not found")
        return quiz_session

    def delete_session(self, session: Session, session_id: int, user_id: int) -> None:
        quiz_session = self.get_session(session, session_id, user_id)
        session.delete(quiz_session)
        session.commit()
        logger.info(f"Deleted quiz session {session_id} of user {user_id}")

    def _get_latest_session(self, session: Session, user_id: int) -> Optional[QuizSession]:
        return session.exec(
            select(QuizSession)
            .where(QuizSession.user_id == user_id)
            .order_by(QuizSession.started_at.desc(), QuizSession.id.desc())  # type: ignore
        ).first()

    def _get_active_session(self, session: Session, user_id: int) -> QuizSession:
        quiz_session = session.exec(
            select(QuizSession)
            .where(QuizSession.user_id == user_id, QuizSession.status == SessionStatus.ACTIVE)
            .order_by(QuizSession.started_at.desc(), QuizSession.id.desc())  # type: ignore
        ).first()
        if not quiz_session:
            raise NotFoundError("No active quiz session found for this user")
        return quiz_session

    # Session lifecycle

    def start_session(self, session: Session, user_id: int) -> QuizSession:
        """
        Resume today's active session or start a new one.

        An active session from an earlier day is completed first.
        """
        latest = self._get_latest_session(session, user_id)
        now = utc_now()

        if latest is None:
            return self.create_session(session, user_id)

        if latest.status == SessionStatus.ACTIVE and is_same_day(latest.started_at, now):
            logger.info(f"Resuming quiz session {latest.id} of user {user_id}")
            return latest

        if latest.status == SessionStatus.ACTIVE:
            latest.status = SessionStatus.COMPLETED
            latest.ended_at = now
            session.add(latest)
            session.commit()
            logger.info(f"Closed stale quiz session {latest.id} of user {user_id}")

        return self.create_session(session, user_id)

    def create_session(
        self,
        session: Session,
        user_id: int,
        session_type: str = DEFAULT_SESSION_TYPE,
        status: SessionStatus = SessionStatus.ACTIVE,
    ) -> QuizSession:
        """
        Create a session with its first package in a single transaction.

        Nothing is persisted if the first package cannot be generated.

        Raises:
            InsufficientDataError: If the catalog has no words for the default level
            UpstreamError: If question generation fails on every attempt
        """
        quiz_session = QuizSession(user_id=user_id, type=session_type, status=status)
        try:
            session.add(quiz_session)
            session.flush()
            self.populate_package(session, quiz_session.id, 1, self.config.default_level)
            session.commit()
        except Exception:
            session.rollback()
            raise

        session.refresh(quiz_session)
        logger.info(f"Created quiz session {quiz_session.id} for user {user_id}")
        return quiz_session

    def finish_session(self, session: Session, user_id: int) -> QuizSession:
        """
        Complete the active session once all packages are generated and answered.

        Raises:
            NotFoundError: If the user has no active session
            ValidationError: If packages are missing or the last one is unanswered
        """
        quiz_session = self._get_active_session(session, user_id)
        packages = quiz_session.packages

        if len(packages) < self.config.max_packages:
            raise ValidationError(
                f"Cannot finish session. Less than {self.config.max_packages} packages generated."
            )
        if not is_package_completed(packages[-1]):
            raise ValidationError("Cannot finish session. Last package is not completed.")

        quiz_session.status = SessionStatus.COMPLETED
        quiz_session.ended_at = utc_now()
        session.add(quiz_session)
        session.commit()
        session.refresh(quiz_session)

        logger.info(f"Finished quiz session {quiz_session.id} of user {user_id}")
        return quiz_session

    # Packages

    def _fetch_random_words(self, session: Session, level: str) -> List[Word]:
        levels = parse_level_range(level)
        words = []
        if levels:
            words = list(session.exec(
                select(Word)
                .where(Word.level.in_(levels))  # type: ignore
                .order_by(func.random())
                .limit(self.config.words_per_package)
            ).all())

        if not words:
            logger.warning(f"No words found for levels: {level}")
            raise InsufficientDataError(f"No words found for levels: {level}")

        if len(words) < self.config.words_per_package:
            logger.warning(
                f"Not enough words: found only {len(words)} for levels {level}, "
                f"expected {self.config.words_per_package}"
            )
        return words

    def _build_items(
        self,
        package_id: int,
        questions: List[GeneratedQuestion],
        words: List[Word],
    ) -> List[QuizItem]:
        if not questions:
            raise UpstreamError("AI generator returned no questions")

        word_ids = {word.id for word in words}
        items = []
        for question in questions:
            if question.word_id not in word_ids:
                raise UpstreamError(f"AI generator returned a question for unknown word {question.word_id}")
            items.append(QuizItem(
                package_id=package_id,
                word_id=question.word_id,
                type=question.type,
                question=question.question,
                correct_answer=question.correct_answer.value,
                answer_a=question.answer_a,
                answer_b=question.answer_b,
                answer_c=question.answer_c,
            ))
        return items

    def populate_package(
        self,
        session: Session,
        quiz_session_id: int,
        sequence: int,
        level: str,
    ) -> QuizPackage:
        """
        Create a package and fill it with generated questions.

        Each generation attempt writes its items inside a savepoint; a failed
        attempt rolls back to the savepoint only, so the package row and the
        enclosing transaction survive for the next attempt. Commit is left to
        the caller.

        Raises:
            InsufficientDataError: If no words exist for the level (not retried)
            UpstreamError: If every attempt fails
        """
        package = QuizPackage(
            session_id=quiz_session_id,
            package=package_name(sequence),
            sequence=sequence,
            level=level,
        )
        session.add(package)
        session.flush()

        words = self._fetch_random_words(session, level)

        for attempt in range(1, self.config.max_generation_attempts + 1):
            try:
                questions = self.generator.generate(words, level)
                items = self._build_items(package.id, questions, words)
                with session.begin_nested():
                    session.add_all(items)
                    session.flush()
            except Exception as e:
                logger.error(
                    f"Attempt {attempt}/{self.config.max_generation_attempts} failed "
                    f"generating {package.package} ({level}): {e}"
                )
                continue

            logger.info(
                f"Generated {package.package} ({level}) with {len(items)} item(s) "
                f"for quiz session {quiz_session_id} on attempt {attempt}"
            )
            return package

        raise UpstreamError("Failed to create quiz: AI generation failed after retries.")

    def submit_package(
        self,
        session: Session,
        user_id: int,
        package_id: int,
        answers: List[PackageAnswer],
    ) -> Dict[str, Any]:
        """
        Record answers for a package and score it.

        Answers for items outside the package are skipped.

        Returns:
            Dict with package_id, correct_count, total and score_percentage

        Raises:
            NotFoundError: If the package does not exist
            AuthorizationError: If the package belongs to another user
        """
        package = session.get(QuizPackage, package_id)
        if not package:
            raise NotFoundError(f"Quiz package with id {package_id} not found")
        if package.session.user_id != user_id:
            raise AuthorizationError(f"Quiz package {package_id} does not belong to user {user_id}")

        items_by_id = {item.id: item for item in package.items}
        for answer in answers:
            item = items_by_id.get(answer.item_id)
            if item is None:
                logger.warning(f"Skipping answer for item {answer.item_id} not in package {package_id}")
                continue
            item.user_answer = answer.answer.strip().upper()
            session.add(item)

        session.commit()

        items = package.items
        correct_count = sum(1 for item in items if item.user_answer == item.correct_answer)
        total = len(items)
        return {
            'package_id': package.id,
            'correct_count': correct_count,
            'total': total,
            'score_percentage': (correct_count / total) * 100 if total > 0 else 0,
        }

    def generate_next_package(self, session: Session, user_id: int) -> QuizPackage:
        """
        Generate the next package of the active session at an adapted level.

        Raises:
            NotFoundError: If the user has no active session
            ValidationError: If the session already has all packages or the
                last package is not fully answered
        """
        quiz_session = self._get_active_session(session, user_id)
        packages = quiz_session.packages

        if len(packages) >= self.config.max_packages:
            raise ValidationError(
                f"Session complete. Maximum {self.config.max_packages} packages allowed."
            )

        # Packages are ordered by sequence; an empty session starts at the default level
        if packages:
            last_package = packages[-1]
            if not is_package_completed(last_package):
                raise ValidationError("Complete previous package first")
            next_level = calculate_adaptive_level(last_package, self.config)
        else:
            next_level = self.config.default_level

        try:
            package = self.populate_package(session, quiz_session.id, len(packages) + 1, next_level)
            session.commit()
        except Exception:
            session.rollback()
            raise

        session.refresh(package)
        return package

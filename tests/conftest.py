import os

# Settings are read at import time; point them at an in-memory database first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["XAI_API_KEY"] = "test-key"

import pytest
from sqlmodel import SQLModel, Session

from lexis.core.database import engine, init_db
from lexis.models.models import User, Word, Meaning, QuizQuestionType, QuizAnswer
from lexis.services.quiz_generator_service import GeneratedQuestion


@pytest.fixture
def db_session():
    """Fresh schema per test on the shared in-memory SQLite engine."""
    init_db(engine)
    with Session(engine) as session:
        yield session
    SQLModel.metadata.drop_all(engine)


def make_user(session, email="learner@example.com", **kwargs):
    user = User(name="Ada", surname="Lovelace", email=email, **kwargs)
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def make_words(session, level, count, prefix=None):
    """Add `count` words at `level`, each with one meaning."""
    prefix = prefix or level.value.lower()
    words = []
    for i in range(count):
        word = Word(
            text=f"{prefix}-word-{i}",
            level=level,
            pronunciation=f"/{prefix}{i}/",
            part_of_speech=["noun"],
        )
        word.meanings = [Meaning(meaning=f"meaning of {prefix} {i}")]
        session.add(word)
        words.append(word)
    session.commit()
    for word in words:
        session.refresh(word)
    return words


def questions_for(words, correct="A"):
    """One valid matching question per word, correct answer in slot `correct`."""
    return [
        GeneratedQuestion(
            wordId=word.id,
            type="matching",
            question=f"Which word means '{word.text}'?",
            answerA=word.text,
            answerB="distractor one",
            answerC="distractor two",
            correctAnswer=correct,
        )
        for word in words
    ]


def broken_questions_for(words):
    """Questions that fail on insert (question is NOT NULL)."""
    return [
        GeneratedQuestion.model_construct(
            wordId=word.id,
            type=QuizQuestionType.MATCHING,
            question=None,
            correctAnswer=QuizAnswer.A,
            answerA="a",
            answerB="b",
            answerC="c",
        )
        for word in words
    ]


class ScriptedGenerator:
    """
    Fake question generator.

    Each call consumes the next scripted step: "ok", "broken", "empty",
    "unknown_word" or an exception instance. Once the script is exhausted
    every call succeeds.
    """

    def __init__(self, *steps):
        self.steps = list(steps)
        self.calls = []

    def generate(self, words, level):
        self.calls.append((list(words), level))
        step = self.steps.pop(0) if self.steps else "ok"
        if isinstance(step, Exception):
            raise step
        if step == "broken":
            return broken_questions_for(words)
        if step == "empty":
            return []
        if step == "unknown_word":
            questions = questions_for(words)
            questions[0] = questions[0].model_copy(update={"word_id": 999999})
            return questions
        return questions_for(words)


@pytest.fixture
def user(db_session):
    return make_user(db_session)


@pytest.fixture
def generator():
    return ScriptedGenerator()

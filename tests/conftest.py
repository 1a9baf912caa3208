import pytest
from fastapi.testclient import TestClient

from quiz_backend.config import Settings
from quiz_backend.infrastructure.db.models.question_model import OptionModel, QuestionModel
from quiz_backend.infrastructure.db.session import create_db_engine, create_session_factory, init_db
from quiz_backend.presentation.app_factory import create_app

RESET_SECRET = "s3cr3t"


@pytest.fixture
def settings():
    return Settings(
        database_url="sqlite://",
        database_name="quiz_test",
        enable_test_endpoint=True,
        test_reset_secret=RESET_SECRET,
    )


@pytest.fixture
def engine(settings):
    eng = create_db_engine(settings)
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def db(engine):
    session = create_session_factory(engine)()
    yield session
    session.close()


@pytest.fixture
def client(settings, engine):
    with TestClient(create_app(settings, engine=engine)) as c:
        yield c


@pytest.fixture
def http_question(db):
    """Question 1 with options 11 (wrong) and 12 (correct)."""
    question = QuestionModel(
        id=1,
        stem="HTTP 状态码 200 表示什么？",
        explanation="200 表示请求成功",
        tags=["http"],
    )
    db.add(question)
    db.add_all([
        OptionModel(id=11, question_id=1, text="未找到", is_correct=False),
        OptionModel(id=12, question_id=1, text="成功", is_correct=True),
    ])
    db.commit()
    return question


@pytest.fixture
def make_question(db):
    def _make(stem, options, explanation=None):
        """options: list of (text, is_correct)."""
        question = QuestionModel(stem=stem, explanation=explanation)
        db.add(question)
        db.flush()
        for text, is_correct in options:
            db.add(OptionModel(question_id=question.id, text=text, is_correct=is_correct))
        db.commit()
        return question
    return _make

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from quiz_backend.config import Settings
from quiz_backend.infrastructure.repositories.question_repository import QuestionRepository
from quiz_backend.presentation.schemas.question_schema import OptionCreate, QuestionCreate

logger = logging.getLogger(__name__)

SEED_FILE = "seed.json"
TEST_SEED_FILE = "seed_test.json"

# Present in every environment
SYSTEM_QUESTION = QuestionCreate(
    stem="Hello World - 基础题",
    explanation="这是一个基础题目，所有环境都会包含这条数据。",
    tags=["基础"],
    options=[
        OptionCreate(text="Hello", is_correct=False),
        OptionCreate(text="World", is_correct=True),
    ],
)


class ProductionSeedError(RuntimeError):
    pass


def ensure_not_prod(settings: Settings) -> None:
    db_name = settings.effective_database_name
    if settings.is_production or "prod" in db_name.lower():
        if not settings.allow_prod_seed:
            logger.warning(f"Refusing to seed/reset database '{db_name}' (env={settings.env})")
            raise ProductionSeedError("Refusing to run seed/reset against production database")


def load_fixture(path: Path) -> List[QuestionCreate]:
    logger.info(f"Loading question fixture from {path}")
    with open(path, encoding="utf-8") as f:
        raw = json.load(f)
    if not isinstance(raw, list):
        raise ValueError(f"Fixture {path} must contain a JSON list of questions")
    return [QuestionCreate.model_validate(item) for item in raw]


def seed_system(db: Session, settings: Settings) -> bool:
    """Idempotently create the base question. Returns True if it was created."""
    ensure_not_prod(settings)
    logger.info("seed_system: beginning (idempotent)")

    repo = QuestionRepository(db)
    if repo.find_by_stem(SYSTEM_QUESTION.stem) is not None:
        logger.info("seed_system: base question already exists")
        return False

    repo.create_question(SYSTEM_QUESTION)
    logger.info("seed_system: created base question")
    return True


def _upsert_all(db: Session, questions: List[QuestionCreate]) -> Dict[str, int]:
    repo = QuestionRepository(db)
    inserted = 0
    updated = 0
    for q in questions:
        _, created = repo.upsert_question(q)
        if created:
            inserted += 1
            logger.info(f"Inserted question '{q.stem}'")
        else:
            updated += 1
            logger.info(f"Updated question '{q.stem}'")
    return {"inserted": inserted, "updated": updated}


def seed_test(db: Session, settings: Settings, fixture_path: Optional[Path] = None) -> Dict[str, int]:
    """Upsert the test fixture by stem."""
    ensure_not_prod(settings)
    path = fixture_path or settings.data_dir / TEST_SEED_FILE
    logger.info("seed_test: beginning (inserting test dataset)")
    result = _upsert_all(db, load_fixture(path))
    logger.info(f"seed_test: finished {result}")
    return result


def seed_dev(db: Session, settings: Settings, fixture_path: Optional[Path] = None) -> Dict[str, int]:
    """System question plus the development dataset."""
    ensure_not_prod(settings)
    seed_system(db, settings)
    path = fixture_path or settings.data_dir / SEED_FILE
    result = _upsert_all(db, load_fixture(path))
    logger.info(f"seed_dev: finished {result}")
    return result


def reset_test(db: Session, settings: Settings, fixture_path: Optional[Path] = None) -> Dict[str, int]:
    """Wipe every question and reseed the system question and the test fixture."""
    ensure_not_prod(settings)
    logger.info("reset_test: wiping and reseeding test data")

    QuestionRepository(db).delete_all()
    seed_system(db, settings)
    result = seed_test(db, settings, fixture_path)

    total = QuestionRepository(db).count()
    logger.info(f"reset_test: finished with {total} questions")
    return {**result, "total": total}

import io
import logging
import re
from typing import Dict, List, Optional

import pandas as pd
from sqlalchemy.orm import Session

from quiz_backend.infrastructure.repositories.question_repository import QuestionRepository
from quiz_backend.presentation.schemas.question_schema import OptionCreate, QuestionCreate

logger = logging.getLogger(__name__)

_OPTION_COLUMN = re.compile(r"^option(\d+)$")


def _option_columns(columns: List[str]) -> List[str]:
    numbered = []
    for col in columns:
        m = _OPTION_COLUMN.match(col)
        if m:
            numbered.append((int(m.group(1)), col))
    return [col for _, col in sorted(numbered)]


def _is_blank(value) -> bool:
    return value is None or (not isinstance(value, str) and pd.isna(value)) or str(value).strip() == ""


def _resolve_correct_index(correct_val: str, cells: List[Optional[str]]) -> int:
    """
    correct_answer is either the 1-based optionN column number ("2", "2.0")
    or the option text itself. Returns the column position.
    """
    try:
        as_number = float(correct_val)
    except ValueError:
        as_number = None

    if as_number is not None and as_number.is_integer() and 1 <= int(as_number) <= len(cells):
        index = int(as_number) - 1
        if cells[index] is None:
            raise ValueError(f"Correct answer {int(as_number)} points at a blank option")
        return index

    for i, text in enumerate(cells):
        if text is not None and text == correct_val:
            return i

    raise ValueError(
        f"Correct answer '{correct_val}' not valid (must be 1-{len(cells)} or match an option text)"
    )


def _parse_tags(value, default_tags: Optional[List[str]]) -> Optional[List[str]]:
    if _is_blank(value):
        return default_tags
    return [t.strip() for t in str(value).split(",") if t.strip()]


def read_question_table(file_content: bytes, filename: str) -> pd.DataFrame:
    if filename.endswith(".csv"):
        df = pd.read_csv(io.BytesIO(file_content), dtype=str)
    elif filename.endswith((".xlsx", ".xls")):
        df = pd.read_excel(io.BytesIO(file_content), dtype=str)
    else:
        raise ValueError("Unsupported file format. Please upload CSV or XLSX.")

    # Clean column names
    df.columns = [str(c).strip().lower() for c in df.columns]
    return df


def process_bulk_upload(
    db: Session,
    file_content: bytes,
    filename: str,
    default_tags: Optional[List[str]] = None,
) -> Dict:
    try:
        logger.info(f"Processing bulk upload: {filename}")
        df = read_question_table(file_content, filename)

        for col in ("stem", "correct_answer"):
            if col not in df.columns:
                raise ValueError(f"Missing required column: {col}")
        option_cols = _option_columns(list(df.columns))
        if len(option_cols) < 2:
            raise ValueError("At least two option columns (option1, option2, ...) are required")

        repo = QuestionRepository(db)
        inserted = 0
        failed = 0
        errors = []

        for index, row in df.iterrows():
            try:
                cells = [None if _is_blank(row[col]) else str(row[col]).strip() for col in option_cols]

                correct_val = str(row["correct_answer"]).strip()
                correct_index = _resolve_correct_index(correct_val, cells)
                options = [
                    OptionCreate(text=text, is_correct=i == correct_index)
                    for i, text in enumerate(cells)
                    if text is not None
                ]

                explanation_val = None
                if "explanation" in df.columns and not _is_blank(row["explanation"]):
                    explanation_val = str(row["explanation"])

                question = QuestionCreate(
                    stem=str(row["stem"]).strip(),
                    explanation=explanation_val,
                    tags=_parse_tags(row["tags"] if "tags" in df.columns else None, default_tags),
                    options=options,
                )

                repo.create_question(question)
                inserted += 1
            except Exception as e:
                failed += 1
                errors.append(f"Row {index + 2}: {str(e)}")

        logger.info(f"Bulk upload finished. Inserted: {inserted}, Failed: {failed}")
        return {
            "total_rows": len(df),
            "inserted": inserted,
            "failed": failed,
            "errors": errors
        }

    except Exception as e:
        logger.error(f"Bulk upload process failed: {e}", exc_info=True)
        raise

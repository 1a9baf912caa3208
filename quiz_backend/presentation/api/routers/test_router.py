from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from quiz_backend.application.admin.seed_usecase import ProductionSeedError, reset_test
from quiz_backend.config import Settings
from quiz_backend.presentation.dependencies import get_db, get_settings, reset_guard
from quiz_backend.presentation.schemas.test_schema import ResetResponse
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/test", tags=["Test tooling"])


@router.post("/reset", response_model=ResetResponse, dependencies=[Depends(reset_guard)])
def reset_test_data(db: Session = Depends(get_db), settings: Settings = Depends(get_settings)):
    try:
        result = reset_test(db, settings)
        logger.info(f"Test data reset: {result}")
        return ResetResponse(ok=True)
    except ProductionSeedError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except Exception as e:
        logger.error(f"Test data reset failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal Server Error")

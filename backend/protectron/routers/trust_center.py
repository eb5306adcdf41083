"""
Trust Center API Routes

Public compliance page of an organization. No authentication.
"""
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..config import load_scoring_config
from ..database import get_db
from ..models.db_models import utcnow
from ..services.trust_center import OrganizationNotFoundError, TrustCenterService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/trust-center", tags=["trust-center"])


@router.get("/{slug}")
async def get_trust_center(slug: str, db: Session = Depends(get_db)) -> Dict[str, Any]:
    """
    AI systems of an organization with risk level, requirement completion
    and live compliance score, plus its approved documents.
    """
    service = TrustCenterService(db, load_scoring_config())
    try:
        return service.build(slug, utcnow())
    except OrganizationNotFoundError as e:
        logger.warning(f"Trust center requested for unknown organization {slug}")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

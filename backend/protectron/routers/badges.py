"""
Badge API Routes

Public, embeddable SVG badge for an issued certificate.
Never errors for unknown or expired certificates: a placeholder badge is
served instead so embeds on third-party pages keep rendering.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..config import load_scoring_config
from ..database import get_db
from ..models.db_models import utcnow
from ..services.certification_service import CertificationService
from ..services.renderer import (
    badge_payload,
    render_badge,
    render_expired_badge,
    render_not_found_badge,
)
from ..services.scoring import is_expired

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/badges", tags=["badges"])

SVG_MEDIA_TYPE = "image/svg+xml"

CACHE_NOT_FOUND = "public, max-age=300"
CACHE_EXPIRED = "public, max-age=3600"
CACHE_ACTIVE = "public, max-age=3600, s-maxage=86400"


def _svg(content: str, cache_control: str, status_code: int = status.HTTP_200_OK, cors: bool = False) -> Response:
    headers = {"Cache-Control": cache_control}
    if cors:
        headers["Access-Control-Allow-Origin"] = "*"
    return Response(content=content, media_type=SVG_MEDIA_TYPE, status_code=status_code, headers=headers)


@router.get("/{cert_id}")
async def get_badge(
    cert_id: str,
    style: Optional[str] = Query(None, description="standard | compact | detailed"),
    format: Optional[str] = Query(None, description="svg (default) | json"),
    db: Session = Depends(get_db),
):
    service = CertificationService(db, load_scoring_config())
    record = service.find_for_badge(cert_id)

    if record is None:
        logger.warning(f"Badge requested for unknown certificate {cert_id}")
        return _svg(render_not_found_badge(), CACHE_NOT_FOUND, status.HTTP_404_NOT_FOUND)

    if is_expired(record.valid_until, utcnow()):
        return _svg(render_expired_badge(), CACHE_EXPIRED)

    badge = service.badge_data(record)
    if (format or "").lower() == "json":
        return JSONResponse(
            content=badge_payload(badge, record.status.value),
            headers={"Cache-Control": CACHE_ACTIVE, "Access-Control-Allow-Origin": "*"},
        )

    return _svg(render_badge(badge, style, app_url=service.app_url), CACHE_ACTIVE, cors=True)
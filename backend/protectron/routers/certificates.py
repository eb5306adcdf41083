"""
Certification API Routes

Live certification view, explicit certificate generation (JSON or PDF),
the organization's certificate list and embed code, and public
certificate verification.
"""
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..auth import get_org_context
from ..config import load_scoring_config
from ..database import get_db
from ..models.context import OrgContext
from ..models.db_models import utcnow
from ..services.certification_service import (
    CertificateNotFoundError,
    CertificationService,
    download_filename,
)
from ..services.scoring import AISystemNotFoundError, CertificationNotEligibleError
from .downloads import pdf_response


router = APIRouter(tags=["certification"])


# =============================================================================
# RESPONSE MODELS
# =============================================================================

class GenerateCertificateResponse(BaseModel):
    cert_id: str
    certification_level: str
    compliance_score: int
    issued_at: str
    valid_until: str
    next_verification_at: str
    certificate_url: str
    download_url: str
    verify_url: str


class CertificateSummary(BaseModel):
    cert_id: str
    ai_system_id: str
    system_name: str
    certification_level: str
    compliance_score: float
    status: str
    certified_at: str
    valid_until: str
    badge_url: str
    verify_url: str


class EmbedResponse(BaseModel):
    cert_id: str
    html: str
    markdown: str
    url: str
    verify_url: str


def get_certification_service(db: Session = Depends(get_db)) -> CertificationService:
    return CertificationService(db, load_scoring_config())


# =============================================================================
# CERTIFICATION VIEW
# =============================================================================

@router.get("/agents/{ai_system_id}/certificate")
async def get_certification(
    ai_system_id: str,
    ctx: OrgContext = Depends(get_org_context),
    service: CertificationService = Depends(get_certification_service),
) -> Dict[str, Any]:
    """
    Certification status of an AI system, recomputed from live signals.
    """
    try:
        view = service.get_view(ctx, ai_system_id, utcnow())
    except AISystemNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return view.to_dict()


@router.post("/agents/{ai_system_id}/certificate/generate", status_code=status.HTTP_201_CREATED)
async def generate_certificate(
    ai_system_id: str,
    download: bool = Query(False, description="Return the certificate as a PDF attachment"),
    ctx: OrgContext = Depends(get_org_context),
    service: CertificationService = Depends(get_certification_service),
):
    """
    Issue a compliance certificate. Requires a certification tier, a
    fully completed requirement checklist and a connected SDK.
    Re-generating replaces the previous certificate of the system.
    """
    try:
        record, issued = service.generate(ctx, ai_system_id, utcnow())
    except AISystemNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except CertificationNotEligibleError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": str(e), "reasons": e.reasons},
        )

    if download:
        return pdf_response(service.certificate_pdf(record), download_filename(record.system_name, record.cert_id))

    return GenerateCertificateResponse(
        cert_id=issued.cert_id,
        certification_level=issued.certification_level.value,
        compliance_score=issued.compliance_score,
        issued_at=issued.issued_at.isoformat(),
        valid_until=issued.valid_until.isoformat(),
        next_verification_at=issued.next_verification_at.isoformat(),
        certificate_url=f"/agents/{ai_system_id}/certificate",
        download_url=f"/agents/{ai_system_id}/certificate/generate?download=true",
        verify_url=f"{service.app_url}/verify/{issued.cert_id}",
    )


# =============================================================================
# ORGANIZATION CERTIFICATES
# =============================================================================

@router.get("/certifications", response_model=List[CertificateSummary])
async def list_certifications(
    ctx: OrgContext = Depends(get_org_context),
    service: CertificationService = Depends(get_certification_service),
):
    return [
        CertificateSummary(
            cert_id=record.cert_id,
            ai_system_id=record.ai_system_id,
            system_name=record.system_name,
            certification_level=record.certification_level,
            compliance_score=record.compliance_score,
            status=record.status.value,
            certified_at=record.certified_at.isoformat(),
            valid_until=record.valid_until.isoformat(),
            badge_url=f"{service.app_url}/badges/{record.cert_id}",
            verify_url=f"{service.app_url}/verify/{record.cert_id}",
        )
        for record in service.list_certificates(ctx)
    ]


@router.get("/certifications/{cert_id}/embed", response_model=EmbedResponse)
async def get_embed_code(
    cert_id: str,
    style: Optional[str] = Query(None, description="standard | compact | detailed"),
    ctx: OrgContext = Depends(get_org_context),
    service: CertificationService = Depends(get_certification_service),
):
    """HTML and Markdown snippets for embedding a certificate badge."""
    try:
        return EmbedResponse(**service.embed(ctx, cert_id, style))
    except CertificateNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


# =============================================================================
# PUBLIC VERIFICATION
# =============================================================================

@router.get("/certificates/{cert_id}/verify")
async def verify_certificate(
    cert_id: str,
    service: CertificationService = Depends(get_certification_service),
):
    """Public certificate verification. No authentication."""
    result = service.verify(cert_id, utcnow())
    if result is None:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"error": "Certificate not found", "valid": False},
        )
    return result

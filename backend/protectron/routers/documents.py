"""
Document API Routes

Compliance documents generated for an AI system and their PDF export.
"""
import logging
from typing import Any, Dict, List, Optional, Union
from uuid import uuid4

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ..auth import get_org_context
from ..database import get_db
from ..models.context import OrgContext
from ..models.db_models import AISystemDB, DocumentDB, DocumentStatus, DocumentType
from ..services.renderer import render_document_pdf
from .ai_systems import get_system_or_404, parse_enum
from .downloads import pdf_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/documents", tags=["documents"])


# =============================================================================
# REQUEST/RESPONSE MODELS
# =============================================================================

class CreateDocumentRequest(BaseModel):
    ai_system_id: str
    name: str = Field(..., min_length=1, max_length=255)
    document_type: str = Field(default="technical", description="technical | risk | policy | model_card")
    generation_prompt: Optional[Union[Dict[str, Any], str]] = Field(
        None, description="Questionnaire answers the document is generated from"
    )


class UpdateDocumentRequest(BaseModel):
    status: str = Field(..., description="draft | review | approved")


class DocumentResponse(BaseModel):
    id: str
    ai_system_id: str
    name: str
    document_type: str
    status: str
    created_at: Optional[str] = None


def _document_response(document: DocumentDB) -> DocumentResponse:
    return DocumentResponse(
        id=document.id,
        ai_system_id=document.ai_system_id,
        name=document.name,
        document_type=document.document_type.value,
        status=document.status.value,
        created_at=document.created_at.isoformat() if document.created_at else None,
    )


def _get_document_or_404(db: Session, ctx: OrgContext, document_id: str) -> DocumentDB:
    document = (
        db.query(DocumentDB)
        .join(AISystemDB, DocumentDB.ai_system_id == AISystemDB.id)
        .filter(DocumentDB.id == document_id, AISystemDB.organization_id == ctx.organization_id)
        .first()
    )
    if document is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Document not found")
    return document


# =============================================================================
# API ENDPOINTS
# =============================================================================

@router.get("", response_model=List[DocumentResponse])
async def list_documents(
    ai_system_id: Optional[str] = Query(None),
    ctx: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    query = (
        db.query(DocumentDB)
        .join(AISystemDB, DocumentDB.ai_system_id == AISystemDB.id)
        .filter(AISystemDB.organization_id == ctx.organization_id)
    )
    if ai_system_id:
        query = query.filter(DocumentDB.ai_system_id == ai_system_id)
    return [_document_response(d) for d in query.order_by(DocumentDB.created_at.desc()).all()]


@router.post("", response_model=DocumentResponse, status_code=status.HTTP_201_CREATED)
async def create_document(
    request: CreateDocumentRequest,
    ctx: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    system = get_system_or_404(db, ctx, request.ai_system_id)
    document = DocumentDB(
        id=str(uuid4()),
        ai_system_id=system.id,
        name=request.name,
        document_type=parse_enum(DocumentType, request.document_type, "document_type"),
        status=DocumentStatus.DRAFT,
        generation_prompt=request.generation_prompt,
    )
    db.add(document)
    db.commit()
    db.refresh(document)

    logger.info(f"Document created: {document.id} ({document.document_type.value}) for AI system {system.id}")
    return _document_response(document)


@router.patch("/{document_id}", response_model=DocumentResponse)
async def update_document(
    document_id: str,
    request: UpdateDocumentRequest,
    ctx: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    """Move a document through review. Approved documents appear in the trust center."""
    document = _get_document_or_404(db, ctx, document_id)
    document.status = parse_enum(DocumentStatus, request.status, "status")
    db.commit()
    db.refresh(document)
    return _document_response(document)


@router.get("/{document_id}/pdf")
async def download_document_pdf(
    document_id: str,
    ctx: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    document = _get_document_or_404(db, ctx, document_id)
    system = document.ai_system
    organization_name = system.organization.name if system and system.organization else None

    content = render_document_pdf(document, system.name if system else None, organization_name)
    filename = "-".join(document.name.split()) or "document"
    return pdf_response(content, f"{filename}.pdf")

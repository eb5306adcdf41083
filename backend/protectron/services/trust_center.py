"""
Trust Center Service

Public compliance page of an organization, looked up by its slug.
Exposes only public-facing data: AI system names, risk levels, live
scores, unexpired certificates and approved documents.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..config import PUBLIC_APP_URL, ScoringConfig
from ..models.db_models import AISystemDB, DocumentDB, DocumentStatus, OrganizationDB
from .scoring import SignalCollector, build_certification_view, requirements_percentage

MAX_PUBLIC_DOCUMENTS = 10


class OrganizationNotFoundError(Exception):
    """No organization is published under this slug."""

    def __init__(self, slug: str):
        self.slug = slug
        super().__init__(f"Organization {slug} not found")


class TrustCenterService:
    """
    Builds the public trust center payload.

    Usage:
        service = TrustCenterService(db)
        page = service.build("acme-ai-1f2e3d", now)
    """

    def __init__(self, db: Session, config: Optional[ScoringConfig] = None, app_url: str = PUBLIC_APP_URL):
        self.db = db
        self.signals = SignalCollector(db, config)
        self.config = self.signals.config
        self.app_url = app_url

    def get_organization(self, slug: str) -> OrganizationDB:
        organization = self.db.query(OrganizationDB).filter(OrganizationDB.slug == slug).first()
        if organization is None:
            raise OrganizationNotFoundError(slug)
        return organization

    def build(self, slug: str, now: datetime) -> Dict[str, Any]:
        organization = self.get_organization(slug)
        systems = (
            self.db.query(AISystemDB)
            .filter(AISystemDB.organization_id == organization.id)
            .order_by(AISystemDB.name)
            .all()
        )

        entries = [self._system_entry(system, now) for system in systems]
        completed = sum(entry["requirements_completed"] for entry in entries)
        total = sum(entry["requirements_total"] for entry in entries)
        updated = [system.updated_at for system in systems if system.updated_at]

        return {
            "name": organization.name,
            "slug": organization.slug,
            "logo_url": organization.logo_url,
            "compliance_score": requirements_percentage(completed, total),
            "last_updated": max(updated).isoformat() if updated else None,
            "ai_systems": entries,
            "documents": self._documents([system.id for system in systems]),
        }

    def _system_entry(self, system: AISystemDB, now: datetime) -> Dict[str, Any]:
        view = build_certification_view(self.signals.collect_for_system(system, now), now, self.config)
        certificate = view.certificate
        if certificate is not None and certificate.expired:
            certificate = None

        return {
            "id": system.id,
            "name": system.name,
            "risk_level": system.risk_level.value if system.risk_level else "minimal",
            "lifecycle_status": system.lifecycle_status.value if system.lifecycle_status else None,
            "requirements_completed": view.requirements.completed,
            "requirements_total": view.requirements.total,
            "compliance_score": view.compliance_score,
            "certification_level": view.certification_level.value,
            "certificate": {
                "cert_id": certificate.cert_id,
                "valid_until": certificate.valid_until.isoformat(),
                "verify_url": f"{self.app_url}/verify/{certificate.cert_id}",
                "badge_url": f"{self.app_url}/badges/{certificate.cert_id}",
            } if certificate else None,
            "last_updated": system.updated_at.isoformat() if system.updated_at else None,
        }

    def _documents(self, ai_system_ids: List[str]) -> List[Dict[str, Any]]:
        if not ai_system_ids:
            return []
        documents = (
            self.db.query(DocumentDB)
            .filter(
                DocumentDB.ai_system_id.in_(ai_system_ids),
                DocumentDB.status == DocumentStatus.APPROVED,
            )
            .order_by(DocumentDB.created_at.desc())
            .limit(MAX_PUBLIC_DOCUMENTS)
            .all()
        )
        return [
            {
                "name": document.name,
                "document_type": document.document_type.value,
                "created_at": document.created_at.isoformat() if document.created_at else None,
            }
            for document in documents
        ]

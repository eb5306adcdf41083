"""
Protectron - SQLAlchemy ORM Models
PostgreSQL database models for persistent storage.

Every tenant-owned row hangs off an organization, either directly
(organization_id) or through its AI system.
"""
from datetime import datetime, timezone
from enum import Enum
from sqlalchemy import Column, String, Float, DateTime, Text, JSON, ForeignKey, Enum as SQLEnum, Boolean, UniqueConstraint
from sqlalchemy.orm import relationship
from ..database import Base


def utcnow() -> datetime:
    """Naive UTC timestamp, the form stored in every DateTime column."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


# =============================================================================
# ENUMS
# =============================================================================

class RiskLevel(str, Enum):
    """EU AI Act risk categories."""
    MINIMAL = "minimal"
    LIMITED = "limited"
    HIGH = "high"
    PROHIBITED = "prohibited"


class LifecycleStatus(str, Enum):
    """Operational state of a monitored AI system."""
    DRAFT = "draft"
    ACTIVE = "active"
    PAUSED = "paused"
    STOPPED = "stopped"
    RETIRED = "retired"


class RequirementStatus(str, Enum):
    """Progress of a single compliance requirement."""
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    COMPLIANT = "compliant"
    NOT_APPLICABLE = "not_applicable"


# Statuses that count toward requirement completion
DONE_REQUIREMENT_STATUSES = (RequirementStatus.COMPLETED, RequirementStatus.COMPLIANT)


class IncidentSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class IncidentStatus(str, Enum):
    """Incident workflow. Anything other than CLOSED counts as open."""
    OPEN = "open"
    INVESTIGATING = "investigating"
    RESOLVED = "resolved"
    CLOSED = "closed"


class CertificateRecordStatus(str, Enum):
    """Stored status of an issued certificate. Expiry is derived, never stored."""
    ACTIVE = "active"
    REVOKED = "revoked"


class DocumentType(str, Enum):
    TECHNICAL = "technical"
    RISK = "risk"
    POLICY = "policy"
    MODEL_CARD = "model_card"


class DocumentStatus(str, Enum):
    DRAFT = "draft"
    REVIEW = "review"
    APPROVED = "approved"


# =============================================================================
# TENANCY
# =============================================================================

class OrganizationDB(Base):
    """A customer organization (tenant)."""
    __tablename__ = "organizations"

    id = Column(String(36), primary_key=True)  # UUID
    name = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, nullable=True, index=True)
    logo_url = Column(String(500), nullable=True)
    created_at = Column(DateTime, default=utcnow)

    # Relationships
    users = relationship("UserDB", back_populates="organization")
    ai_systems = relationship("AISystemDB", back_populates="organization", cascade="all, delete-orphan")


class UserDB(Base):
    """User account. Belongs to exactly one organization."""
    __tablename__ = "users"

    id = Column(String(36), primary_key=True)  # UUID
    email = Column(String(255), unique=True, nullable=False, index=True)
    username = Column(String(100), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    full_name = Column(String(255), nullable=True)
    role = Column(String(20), default="member")  # member | admin
    organization_id = Column(String(36), ForeignKey("organizations.id", ondelete="SET NULL"), nullable=True, index=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    organization = relationship("OrganizationDB", back_populates="users")


# =============================================================================
# AI SYSTEM INVENTORY
# =============================================================================

class AISystemDB(Base):
    """An AI system (agent) tracked for EU AI Act compliance."""
    __tablename__ = "ai_systems"

    id = Column(String(36), primary_key=True)  # UUID
    organization_id = Column(String(36), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    risk_level = Column(SQLEnum(RiskLevel), default=RiskLevel.MINIMAL)
    lifecycle_status = Column(SQLEnum(LifecycleStatus), default=LifecycleStatus.DRAFT)

    # SDK telemetry integration
    sdk_connected = Column(Boolean, default=False)
    sdk_last_event_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    organization = relationship("OrganizationDB", back_populates="ai_systems")
    requirements = relationship("RequirementDB", back_populates="ai_system", cascade="all, delete-orphan")
    hitl_rules = relationship("HITLRuleDB", back_populates="ai_system", cascade="all, delete-orphan")
    incidents = relationship("IncidentDB", back_populates="ai_system", cascade="all, delete-orphan")
    audit_events = relationship("AuditEventDB", back_populates="ai_system", cascade="all, delete-orphan")
    certifications = relationship("CertificationDB", back_populates="ai_system", cascade="all, delete-orphan")
    documents = relationship("DocumentDB", back_populates="ai_system", cascade="all, delete-orphan")


class RequirementDB(Base):
    """One applicable requirement from the system's risk-tier checklist."""
    __tablename__ = "ai_system_requirements"

    id = Column(String(36), primary_key=True)  # UUID
    ai_system_id = Column(String(36), ForeignKey("ai_systems.id", ondelete="CASCADE"), nullable=False, index=True)

    title = Column(String(500), nullable=False)
    article = Column(String(50), nullable=True)  # e.g. "Art. 14"
    status = Column(SQLEnum(RequirementStatus), default=RequirementStatus.NOT_STARTED)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    ai_system = relationship("AISystemDB", back_populates="requirements")


class HITLRuleDB(Base):
    """Human-in-the-loop rule gating an agent action."""
    __tablename__ = "agent_hitl_rules"

    id = Column(String(36), primary_key=True)  # UUID
    ai_system_id = Column(String(36), ForeignKey("ai_systems.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String(255), nullable=False)
    action_type = Column(String(100), nullable=True)
    is_active = Column(Boolean, default=True)

    created_at = Column(DateTime, default=utcnow)

    ai_system = relationship("AISystemDB", back_populates="hitl_rules")


class IncidentDB(Base):
    """Reported incident for an AI system."""
    __tablename__ = "agent_incidents"

    id = Column(String(36), primary_key=True)  # UUID
    ai_system_id = Column(String(36), ForeignKey("ai_systems.id", ondelete="CASCADE"), nullable=False, index=True)

    incident_type = Column(String(100), nullable=False)
    severity = Column(SQLEnum(IncidentSeverity), default=IncidentSeverity.MEDIUM)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    status = Column(SQLEnum(IncidentStatus), default=IncidentStatus.OPEN)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    ai_system = relationship("AISystemDB", back_populates="incidents")


class AuditEventDB(Base):
    """Telemetry event reported by the agent SDK."""
    __tablename__ = "agent_audit_events"
    __table_args__ = (
        UniqueConstraint("ai_system_id", "event_id", name="uq_agent_audit_events_system_event"),
    )

    id = Column(String(36), primary_key=True)  # UUID
    ai_system_id = Column(String(36), ForeignKey("ai_systems.id", ondelete="CASCADE"), nullable=False, index=True)

    event_id = Column(String(100), nullable=False)  # Client-supplied, dedup key per system
    event_type = Column(String(100), nullable=False)
    event_timestamp = Column(DateTime, nullable=False, index=True)
    payload = Column(JSON, nullable=True)

    created_at = Column(DateTime, default=utcnow)

    ai_system = relationship("AISystemDB", back_populates="audit_events")


# =============================================================================
# CERTIFICATION
# =============================================================================

class CertificationDB(Base):
    """
    An explicitly generated compliance certificate.

    Score, level and eligibility are never read back from this row for
    the live view; the row only proves that a certificate was issued and
    snapshots what it attested to (for the badge and verify endpoints).
    """
    __tablename__ = "ai_system_certifications"

    id = Column(String(36), primary_key=True)  # UUID
    ai_system_id = Column(String(36), ForeignKey("ai_systems.id", ondelete="CASCADE"), nullable=False, index=True)
    organization_id = Column(String(36), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)

    cert_id = Column(String(64), unique=True, nullable=False, index=True)
    certification_level = Column(String(20), nullable=False)  # bronze | silver | gold
    compliance_score = Column(Float, nullable=False)
    status = Column(SQLEnum(CertificateRecordStatus), default=CertificateRecordStatus.ACTIVE)

    # Snapshot for public rendering
    system_name = Column(String(255), nullable=False)
    risk_level = Column(String(20), nullable=False)
    badge_color = Column(String(20), nullable=False)
    requirements_snapshot = Column(JSON, nullable=True)  # {"total", "completed", "checks": {...}}

    certified_at = Column(DateTime, nullable=False)
    valid_until = Column(DateTime, nullable=False)
    next_verification_at = Column(DateTime, nullable=False)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    ai_system = relationship("AISystemDB", back_populates="certifications")
    organization = relationship("OrganizationDB")


# =============================================================================
# DOCUMENTS & ACTIVITY
# =============================================================================

class DocumentDB(Base):
    """Generated compliance document (technical file, risk assessment, ...)."""
    __tablename__ = "documents"

    id = Column(String(36), primary_key=True)  # UUID
    ai_system_id = Column(String(36), ForeignKey("ai_systems.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String(255), nullable=False)
    document_type = Column(SQLEnum(DocumentType), default=DocumentType.TECHNICAL)
    status = Column(SQLEnum(DocumentStatus), default=DocumentStatus.DRAFT)
    # Questionnaire answers the document was generated from (dict or raw JSON text)
    generation_prompt = Column(JSON, nullable=True)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    ai_system = relationship("AISystemDB", back_populates="documents")


class ActivityLogDB(Base):
    """Organization activity feed."""
    __tablename__ = "activity_log"

    id = Column(String(36), primary_key=True)  # UUID
    organization_id = Column(String(36), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    ai_system_id = Column(String(36), ForeignKey("ai_systems.id", ondelete="CASCADE"), nullable=True, index=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    action_type = Column(String(100), nullable=False)
    action_description = Column(Text, nullable=True)

    created_at = Column(DateTime, default=utcnow)

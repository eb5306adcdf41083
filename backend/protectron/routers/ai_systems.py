"""
AI System API Routes

Inventory of monitored AI systems and the inputs the compliance score is
computed from: requirement checklist, HITL rules, incidents and SDK
telemetry events. Everything is scoped to the caller's organization; a
system owned by another organization answers 404.
"""
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Type
from uuid import uuid4

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..auth import get_org_context
from ..database import get_db
from ..models.context import OrgContext
from ..models.db_models import (
    AISystemDB,
    AuditEventDB,
    HITLRuleDB,
    IncidentDB,
    IncidentSeverity,
    IncidentStatus,
    LifecycleStatus,
    RequirementDB,
    RequirementStatus,
    RiskLevel,
    utcnow,
)
from ..services.scoring import AISystemNotFoundError, SignalCollector

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ai-systems", tags=["ai-systems"])


# =============================================================================
# REQUEST/RESPONSE MODELS
# =============================================================================

class CreateAISystemRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    risk_level: str = Field(default="minimal", description="minimal | limited | high | prohibited")
    lifecycle_status: str = Field(default="draft", description="draft | active | paused | stopped | retired")


class UpdateAISystemRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    risk_level: Optional[str] = None
    lifecycle_status: Optional[str] = None


class AISystemResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    risk_level: str
    lifecycle_status: str
    sdk_connected: bool
    sdk_last_event_at: Optional[str] = None
    created_at: Optional[str] = None


class CreateRequirementRequest(BaseModel):
    title: str = Field(..., min_length=1)
    article: Optional[str] = Field(None, description="EU AI Act article, e.g. 'Art. 14'")
    status: str = Field(default="not_started")


class UpdateRequirementRequest(BaseModel):
    status: str


class RequirementResponse(BaseModel):
    id: str
    title: str
    article: Optional[str] = None
    status: str


class CreateHITLRuleRequest(BaseModel):
    name: str = Field(..., min_length=1)
    action_type: Optional[str] = None
    is_active: bool = True


class UpdateHITLRuleRequest(BaseModel):
    is_active: bool


class HITLRuleResponse(BaseModel):
    id: str
    name: str
    action_type: Optional[str] = None
    is_active: bool


class CreateIncidentRequest(BaseModel):
    incident_type: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    description: str
    severity: str = Field(default="medium")


class UpdateIncidentRequest(BaseModel):
    status: str


class IncidentResponse(BaseModel):
    id: str
    incident_type: str
    title: str
    description: str
    severity: str
    status: str
    created_at: Optional[str] = None


class IngestEventRequest(BaseModel):
    """Telemetry event reported by the agent SDK."""
    event_id: str = Field(..., min_length=1, max_length=100, description="Client-generated, unique per event")
    event_type: str = Field(..., min_length=1, max_length=100)
    timestamp: Optional[datetime] = Field(None, description="Defaults to receive time")
    payload: Optional[Dict[str, Any]] = None


class IngestEventResponse(BaseModel):
    id: str
    event_id: str
    ai_system_id: str
    sdk_connected: bool


# =============================================================================
# HELPERS
# =============================================================================

def parse_enum(enum_cls: Type[Enum], value: str, field: str):
    """Parse an enum value or raise 400 listing the valid values."""
    try:
        return enum_cls(value.lower() if isinstance(value, str) else value)
    except ValueError:
        valid = ", ".join(member.value for member in enum_cls)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {field} '{value}'. Must be one of: {valid}"
        )


def get_system_or_404(db: Session, ctx: OrgContext, ai_system_id: str) -> AISystemDB:
    try:
        return SignalCollector(db).get_system(ctx, ai_system_id)
    except AISystemNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


def _iso(dt: Optional[datetime]) -> Optional[str]:
    return dt.isoformat() if dt else None


def _to_naive_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def _system_response(system: AISystemDB) -> AISystemResponse:
    return AISystemResponse(
        id=system.id,
        name=system.name,
        description=system.description,
        risk_level=system.risk_level.value if system.risk_level else RiskLevel.MINIMAL.value,
        lifecycle_status=system.lifecycle_status.value if system.lifecycle_status else LifecycleStatus.DRAFT.value,
        sdk_connected=bool(system.sdk_connected),
        sdk_last_event_at=_iso(system.sdk_last_event_at),
        created_at=_iso(system.created_at),
    )


def _requirement_response(req: RequirementDB) -> RequirementResponse:
    return RequirementResponse(id=req.id, title=req.title, article=req.article, status=req.status.value)


def _rule_response(rule: HITLRuleDB) -> HITLRuleResponse:
    return HITLRuleResponse(id=rule.id, name=rule.name, action_type=rule.action_type, is_active=bool(rule.is_active))


def _incident_response(incident: IncidentDB) -> IncidentResponse:
    return IncidentResponse(
        id=incident.id,
        incident_type=incident.incident_type,
        title=incident.title,
        description=incident.description,
        severity=incident.severity.value,
        status=incident.status.value,
        created_at=_iso(incident.created_at),
    )


# =============================================================================
# AI SYSTEMS
# =============================================================================

@router.get("", response_model=List[AISystemResponse])
async def list_ai_systems(ctx: OrgContext = Depends(get_org_context), db: Session = Depends(get_db)):
    systems = (
        db.query(AISystemDB)
        .filter(AISystemDB.organization_id == ctx.organization_id)
        .order_by(AISystemDB.created_at.desc())
        .all()
    )
    return [_system_response(s) for s in systems]


@router.post("", response_model=AISystemResponse, status_code=status.HTTP_201_CREATED)
async def create_ai_system(
    request: CreateAISystemRequest,
    ctx: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    system = AISystemDB(
        id=str(uuid4()),
        organization_id=ctx.organization_id,
        name=request.name,
        description=request.description,
        risk_level=parse_enum(RiskLevel, request.risk_level, "risk_level"),
        lifecycle_status=parse_enum(LifecycleStatus, request.lifecycle_status, "lifecycle_status"),
        sdk_connected=False,
    )
    db.add(system)
    db.commit()
    db.refresh(system)

    logger.info(f"AI system created: {system.id} ({system.name}) in organization {ctx.organization_id}")
    return _system_response(system)


@router.get("/{ai_system_id}", response_model=AISystemResponse)
async def get_ai_system(ai_system_id: str, ctx: OrgContext = Depends(get_org_context), db: Session = Depends(get_db)):
    return _system_response(get_system_or_404(db, ctx, ai_system_id))


@router.patch("/{ai_system_id}", response_model=AISystemResponse)
async def update_ai_system(
    ai_system_id: str,
    request: UpdateAISystemRequest,
    ctx: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    system = get_system_or_404(db, ctx, ai_system_id)
    if request.name is not None:
        system.name = request.name
    if request.description is not None:
        system.description = request.description
    if request.risk_level is not None:
        system.risk_level = parse_enum(RiskLevel, request.risk_level, "risk_level")
    if request.lifecycle_status is not None:
        system.lifecycle_status = parse_enum(LifecycleStatus, request.lifecycle_status, "lifecycle_status")
    db.commit()
    db.refresh(system)
    return _system_response(system)


# =============================================================================
# REQUIREMENTS
# =============================================================================

@router.get("/{ai_system_id}/requirements", response_model=List[RequirementResponse])
async def list_requirements(ai_system_id: str, ctx: OrgContext = Depends(get_org_context), db: Session = Depends(get_db)):
    system = get_system_or_404(db, ctx, ai_system_id)
    return [_requirement_response(r) for r in system.requirements]


@router.post("/{ai_system_id}/requirements", response_model=RequirementResponse, status_code=status.HTTP_201_CREATED)
async def create_requirement(
    ai_system_id: str,
    request: CreateRequirementRequest,
    ctx: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    system = get_system_or_404(db, ctx, ai_system_id)
    requirement = RequirementDB(
        id=str(uuid4()),
        ai_system_id=system.id,
        title=request.title,
        article=request.article,
        status=parse_enum(RequirementStatus, request.status, "status"),
    )
    db.add(requirement)
    db.commit()
    db.refresh(requirement)
    return _requirement_response(requirement)


@router.patch("/{ai_system_id}/requirements/{requirement_id}", response_model=RequirementResponse)
async def update_requirement(
    ai_system_id: str,
    requirement_id: str,
    request: UpdateRequirementRequest,
    ctx: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    system = get_system_or_404(db, ctx, ai_system_id)
    requirement = db.query(RequirementDB).filter(
        RequirementDB.id == requirement_id, RequirementDB.ai_system_id == system.id
    ).first()
    if requirement is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Requirement not found")

    requirement.status = parse_enum(RequirementStatus, request.status, "status")
    db.commit()
    db.refresh(requirement)
    return _requirement_response(requirement)


# =============================================================================
# HUMAN-IN-THE-LOOP RULES
# =============================================================================

@router.get("/{ai_system_id}/hitl-rules", response_model=List[HITLRuleResponse])
async def list_hitl_rules(ai_system_id: str, ctx: OrgContext = Depends(get_org_context), db: Session = Depends(get_db)):
    system = get_system_or_404(db, ctx, ai_system_id)
    return [_rule_response(r) for r in system.hitl_rules]


@router.post("/{ai_system_id}/hitl-rules", response_model=HITLRuleResponse, status_code=status.HTTP_201_CREATED)
async def create_hitl_rule(
    ai_system_id: str,
    request: CreateHITLRuleRequest,
    ctx: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    system = get_system_or_404(db, ctx, ai_system_id)
    rule = HITLRuleDB(
        id=str(uuid4()),
        ai_system_id=system.id,
        name=request.name,
        action_type=request.action_type,
        is_active=request.is_active,
    )
    db.add(rule)
    db.commit()
    db.refresh(rule)
    return _rule_response(rule)


@router.patch("/{ai_system_id}/hitl-rules/{rule_id}", response_model=HITLRuleResponse)
async def update_hitl_rule(
    ai_system_id: str,
    rule_id: str,
    request: UpdateHITLRuleRequest,
    ctx: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    system = get_system_or_404(db, ctx, ai_system_id)
    rule = db.query(HITLRuleDB).filter(HITLRuleDB.id == rule_id, HITLRuleDB.ai_system_id == system.id).first()
    if rule is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="HITL rule not found")

    rule.is_active = request.is_active
    db.commit()
    db.refresh(rule)
    return _rule_response(rule)


# =============================================================================
# INCIDENTS
# =============================================================================

@router.get("/{ai_system_id}/incidents", response_model=List[IncidentResponse])
async def list_incidents(ai_system_id: str, ctx: OrgContext = Depends(get_org_context), db: Session = Depends(get_db)):
    system = get_system_or_404(db, ctx, ai_system_id)
    return [_incident_response(i) for i in system.incidents]


@router.post("/{ai_system_id}/incidents", response_model=IncidentResponse, status_code=status.HTTP_201_CREATED)
async def report_incident(
    ai_system_id: str,
    request: CreateIncidentRequest,
    ctx: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    system = get_system_or_404(db, ctx, ai_system_id)
    incident = IncidentDB(
        id=str(uuid4()),
        ai_system_id=system.id,
        incident_type=request.incident_type,
        title=request.title,
        description=request.description,
        severity=parse_enum(IncidentSeverity, request.severity, "severity"),
        status=IncidentStatus.OPEN,
    )
    db.add(incident)
    db.commit()
    db.refresh(incident)

    logger.info(f"Incident reported for AI system {system.id}: {incident.title} ({incident.severity.value})")
    return _incident_response(incident)


@router.patch("/{ai_system_id}/incidents/{incident_id}", response_model=IncidentResponse)
async def update_incident(
    ai_system_id: str,
    incident_id: str,
    request: UpdateIncidentRequest,
    ctx: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    system = get_system_or_404(db, ctx, ai_system_id)
    incident = db.query(IncidentDB).filter(IncidentDB.id == incident_id, IncidentDB.ai_system_id == system.id).first()
    if incident is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Incident not found")

    incident.status = parse_enum(IncidentStatus, request.status, "status")
    db.commit()
    db.refresh(incident)
    return _incident_response(incident)


# =============================================================================
# SDK TELEMETRY
# =============================================================================

def _duplicate_event(event_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail=f"Event {event_id} already recorded"
    )


@router.post("/{ai_system_id}/events", response_model=IngestEventResponse, status_code=status.HTTP_201_CREATED)
async def ingest_event(
    ai_system_id: str,
    request: IngestEventRequest,
    ctx: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    """
    Record an SDK telemetry event. The first event marks the system's SDK
    as connected. event_id is the dedup key within the system: replays answer 409.
    """
    system = get_system_or_404(db, ctx, ai_system_id)

    duplicate = (
        db.query(AuditEventDB)
        .filter(AuditEventDB.ai_system_id == system.id, AuditEventDB.event_id == request.event_id)
        .first()
    )
    if duplicate is not None:
        raise _duplicate_event(request.event_id)

    received_at = utcnow()
    event = AuditEventDB(
        id=str(uuid4()),
        ai_system_id=system.id,
        event_id=request.event_id,
        event_type=request.event_type,
        event_timestamp=_to_naive_utc(request.timestamp) if request.timestamp else received_at,
        payload=request.payload,
    )
    db.add(event)

    if not system.sdk_connected:
        logger.info(f"SDK connected for AI system {system.id}")
    system.sdk_connected = True
    system.sdk_last_event_at = received_at
    try:
        db.commit()
    except IntegrityError:
        # Concurrent replay of the same event_id
        db.rollback()
        raise _duplicate_event(request.event_id)

    return IngestEventResponse(
        id=event.id,
        event_id=event.event_id,
        ai_system_id=system.id,
        sdk_connected=True,
    )

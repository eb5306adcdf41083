"""
Protectron - FastAPI Application

Main entry point for the Protectron backend.

Architecture:
- AI system state + SDK telemetry → SignalCollector → ComplianceSignals
- ComplianceSignals → Scoring Engine → score + certification level
- Certification view → explicit generation → stored certificate
- Stored certificate → Renderers → badge SVG / certificate PDF
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .routers import (
    auth_router,
    ai_systems_router,
    certificates_router,
    badges_router,
    documents_router,
    trust_center_router,
)
from .database import init_db


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize database on startup."""
    init_db()
    yield

# Create FastAPI app
app = FastAPI(
    lifespan=lifespan,
    title="Protectron",
    description="""
    Protectron - EU AI Act Compliance Platform

    Tracks AI systems, scores their compliance with the EU AI Act and
    issues verifiable certificates with embeddable badges.

    ## Certification
    1. **Signals**: requirement checklist, SDK connection, HITL rules, incidents, telemetry
    2. **Score**: requirements percentage plus up to 15 bonus points, clamped to 0-100
    3. **Tier**: Bronze (70), Silver (85), Gold (95)
    4. **Certificate**: issued explicitly, valid 12 months, re-verified every 90 days

    ## Key Principles
    - The certification view is recomputed from live signals on every read
    - Certificates exist only for systems with a complete checklist
    - Every query is scoped to the caller's organization
    - Badges and certificates render deterministically from stored data
    - Each organization has a public trust center at /trust-center/{slug}
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth_router)
app.include_router(ai_systems_router)
app.include_router(certificates_router)
app.include_router(badges_router)
app.include_router(documents_router)
app.include_router(trust_center_router)


@app.get("/")
async def root():
    """Root endpoint - API information."""
    return {
        "name": "Protectron",
        "version": "1.0.0",
        "description": "EU AI Act Compliance Platform",
        "docs": "/docs",
        "certification_levels": {
            "bronze": "score >= 70",
            "silver": "score >= 85",
            "gold": "score >= 95",
        }
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": "1.0.0"}


# For running with: python -m protectron.main
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8001)

"""Protectron - API Routers"""
from .auth import router as auth_router
from .ai_systems import router as ai_systems_router
from .certificates import router as certificates_router
from .badges import router as badges_router
from .documents import router as documents_router
from .trust_center import router as trust_center_router

__all__ = [
    "auth_router",
    "ai_systems_router",
    "certificates_router",
    "badges_router",
    "documents_router",
    "trust_center_router",
]

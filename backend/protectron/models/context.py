"""
Protectron - Request Context

Organization scoping is passed explicitly into every service call.
Nothing below the routers reads the session or the current user.
"""
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class OrgContext:
    """Tenant scope of one request."""
    organization_id: str
    user_id: Optional[str] = None

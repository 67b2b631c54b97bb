"""
Route modules for the merchant backend.
"""

from .auth import router as auth_router
from .billing import router as billing_router
from .dashboard import router as dashboard_router
from .profile import router as profile_router

__all__ = ["auth_router", "billing_router", "dashboard_router", "profile_router"]

"""
API Routers Package
"""

from .analytics import router as analytics_router
from .recommendations import router as recommendations_router
from .routines import router as routines_router

__all__ = ['analytics_router', 'recommendations_router', 'routines_router']

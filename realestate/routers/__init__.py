"""
API routers package.
"""

from realestate.routers.auth import router as auth_router, token_router
from realestate.routers.images import router as images_router
from realestate.routers.owners import router as owners_router
from realestate.routers.password import router as password_router
from realestate.routers.properties import router as properties_router
from realestate.routers.traces import router as traces_router
from realestate.routers.users import router as users_router

__all__ = [
    "auth_router",
    "token_router",
    "images_router",
    "owners_router",
    "password_router",
    "properties_router",
    "traces_router",
    "users_router",
]

"""
FastAPI dependencies for authentication and authorization.
"""

from fastapi import Depends, Request

from prefscale.app import PrefscaleApp
from prefscale.models.account import Role
from prefscale.models.token import Identity


def get_backend(request: Request) -> PrefscaleApp:
    """Service container created by create_app()"""
    return request.app.state.backend


def require_auth(request: Request, backend: PrefscaleApp = Depends(get_backend)) -> Identity:
    """Any valid session token"""
    identity = backend.guard.authorize(request.headers)
    request.state.identity = identity
    return identity


def require_admin(request: Request, backend: PrefscaleApp = Depends(get_backend)) -> Identity:
    """Valid session token with role=admin"""
    identity = backend.guard.authorize(request.headers, required_role=Role.ADMIN)
    request.state.identity = identity
    return identity

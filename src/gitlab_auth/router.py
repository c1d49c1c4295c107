"""
FastAPI auth router: login, callback, /me, logout.

Builds an APIRouter around any OAuthProvider; the verified user returned by
the provider's callback handling is stored in the Starlette session.
"""

import logging

from authlib.integrations.starlette_client import OAuthError
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, RedirectResponse

from gitlab_auth.errors import GitLabAuthError
from gitlab_auth.protocol import OAuthProvider

logger = logging.getLogger(__name__)


def create_auth_router(provider: OAuthProvider):
    """Create an APIRouter with /login, /auth/callback, /me, and /logout endpoints."""
    router = APIRouter()

    @router.get("/login")
    async def login(request: Request):
        """Redirect the user to the IdP login page."""
        return await provider.login_redirect(request, str(request.url_for("auth_callback")))

    @router.get("/auth/callback", name="auth_callback")
    async def auth_callback(request: Request):
        """Handle OAuth callback: exchange code, fetch profile, store the verified user, redirect to /me."""
        try:
            user = await provider.handle_callback(request)
        except (OAuthError, GitLabAuthError) as e:
            logger.warning("%s login failed: %s", provider.name, e)
            return JSONResponse({"error": str(e)}, status_code=401)

        request.session["user"] = user
        return RedirectResponse(url="/me")

    @router.get("/me")
    async def me(request: Request):
        """Return current user; redirect to /login if not authenticated."""
        if "user" not in request.session:
            return RedirectResponse(url="/login")
        return {"user": request.session["user"]}

    @router.get("/logout")
    async def logout(request: Request):
        """Clear session and redirect to home."""
        request.session.clear()
        return RedirectResponse(url="/")

    return router

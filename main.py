"""
FastAPI app: GitLab OAuth login with session-stored user profile.

Decisions:
- .env is loaded before importing gitlab_auth so GITLAB_* and SESSION_SECRET are
  available when the provider is configured (Ruff E402 suppressed for that).
- GITLAB_SCOPE containing "api" also fetches the user's groups; a failed groups
  fetch fails the login unless GITLAB_GROUPS_FETCH_POLICY=best_effort.
- Session secret from SESSION_SECRET env; default "change-me" is for dev only.
"""

import logging
import os

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from starlette.middleware.sessions import SessionMiddleware

load_dotenv()

# Load .env before gitlab_auth so GITLAB_* and SESSION_SECRET are set; Ruff E402.
from gitlab_auth import GitLabConfig, GitLabOAuthProvider, Profile, create_auth_router  # noqa: E402

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))

SESSION_SECRET = os.getenv("SESSION_SECRET", "change-me")


async def verify(access_token: str, refresh_token, profile: Profile):
    """Keep only what the session needs; tokens and the raw body stay out of the cookie."""
    user = profile.to_dict()
    user.pop("_raw")
    user.pop("_json")
    return user


app = FastAPI()
app.add_middleware(SessionMiddleware, secret_key=SESSION_SECRET)
app.include_router(create_auth_router(GitLabOAuthProvider(GitLabConfig.from_env(), verify)))


@app.get("/")
async def home(request: Request):
    user = request.session.get("user")
    return {"logged_in": bool(user), "user": user}

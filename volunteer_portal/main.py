"""FastAPI application entry point."""

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from volunteer_portal.api.deps import get_current_account
from volunteer_portal.api.middleware import (
    RateLimitMiddleware,
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
)
from volunteer_portal.api.routes import metrics, profile_setup, reasons
from volunteer_portal.core.config import get_settings
from volunteer_portal.core.structured_logging import configure_logging
from volunteer_portal.models.account import Account
from volunteer_portal.schemas.account import AccountResponse

settings = get_settings()
configure_logging()

docs_enabled = settings.api_docs_enabled
if docs_enabled is None:
    docs_enabled = settings.environment != "production"

app = FastAPI(
    title="Volunteer Portal API",
    description="Profile setup invitations and reason scheduling",
    version="1.0.0",
    docs_url="/api/docs" if docs_enabled else None,
    redoc_url="/api/redoc" if docs_enabled else None,
    openapi_url="/api/openapi.json" if docs_enabled else None,
)

# Last added runs first: CORS, request logging, security headers, rate limiting
app.add_middleware(RateLimitMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok"}


app.include_router(profile_setup.router, prefix="/api/profile-setup", tags=["profile-setup"])
app.include_router(reasons.router, prefix="/api/users", tags=["reasons"])
app.include_router(metrics.router, prefix="/api", tags=["metrics"])


@app.get("/api/me", response_model=AccountResponse, tags=["auth"])
async def get_current_account_info(current_account: Account = Depends(get_current_account)):
    """Get the account behind the session credential."""
    return AccountResponse(
        id=current_account.id,
        email=current_account.email,
        role=current_account.role.value,
        first_name=current_account.first_name,
        last_name=current_account.last_name,
        time_zone=current_account.time_zone,
        is_active=current_account.is_active,
        created_at=current_account.created_at,
    )

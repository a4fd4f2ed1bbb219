# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================
# Pydantic models for identity-aware proxy (IAP) users and admin sessions.
# =============================================================================

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class IAPUser(BaseModel):
    """
    User asserted by the perimeter identity-aware proxy.

    Serialized with camelCase names (userId) for the browser.
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    email: str = ""
    user_id: str = Field(default="", alias="userId")
    domain: str = "gmail.com"
    verified: bool = True
    mode: Optional[Literal["development"]] = None

    @classmethod
    def from_claims(cls, claims: dict) -> "IAPUser":
        """Build from decoded token claims (sub, email, hd)."""
        return cls(
            email=claims.get("email") or "",
            user_id=claims.get("sub") or "",
            domain=claims.get("hd") or "gmail.com",
            verified=True,
        )


# Returned by /api/user-info when a development session cookie is present
DEVELOPMENT_USER = IAPUser(
    email="admin@desarrollo.local",
    user_id="dev-user-123",
    domain="desarrollo.local",
    verified=True,
    mode="development",
)


class VerifyIAPRequest(BaseModel):
    """Body of POST /api/verify-iap."""
    token: Optional[str] = None


class AdminSession(BaseModel):
    """
    How an admin request was let through.

    - dev_token: ?token= matched DEV_ADMIN_TOKEN (cookie is set)
    - dev_cookie: existing development session cookie
    - iap: verified IAP assertion header
    - development: no credentials, allowed because ENVIRONMENT=development
    """
    method: Literal["dev_token", "dev_cookie", "iap", "development"]
    user: Optional[IAPUser] = None

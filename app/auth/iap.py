# =============================================================================
# app/auth/iap.py - Identity-Aware Proxy Assertion Verification
# =============================================================================
# Verifies the signed JWT that the perimeter identity-aware proxy (IAP)
# attaches to requests (x-goog-iap-jwt-assertion).
#
# Rules:
# - IAP_AUDIENCE configured: signature (Google public JWKS) and audience are
#   verified, then the issuer must be one of VALID_ISSUERS.
# - IAP_AUDIENCE missing: only ENVIRONMENT=development decodes the claims
#   without verification (local testing). Every other mode fails closed.
#
# Usage:
#   verifier = IAPVerifier(audience=settings.IAP_AUDIENCE, environment=settings.ENVIRONMENT)
#   user = verifier.verify(token)   # IAPUser or None
# =============================================================================

import logging
import time
from typing import Any, Callable, Sequence

import httpx
from jose import ExpiredSignatureError, JWTError, jwt

from app.auth.models import IAPUser

logger = logging.getLogger(__name__)

VALID_ISSUERS = (
    "https://cloud.google.com/iap",
    "accounts.google.com",
)

# IAP signs with ES256; Google-issued ID tokens use RS256
GOOGLE_JWKS_URLS = (
    "https://www.gstatic.com/iap/verify/public_key-jwk",
    "https://www.googleapis.com/oauth2/v3/certs",
)

DEFAULT_ALGORITHMS = ("ES256", "RS256")

JWKS_CACHE_TTL = 3600  # 1 hour
JWKS_FAILURE_TTL = 60  # wait after a refresh that loaded no keys

# (kid, alg) -> verification key, or None when unknown
KeyProvider = Callable[[str | None, str], Any]


class JWKSKeyProvider:
    """
    Fetches and caches Google's public signing keys.

    A failed refresh keeps serving the previous keys, even if expired, and
    no new fetch is attempted for `failure_ttl` seconds afterwards.
    """

    def __init__(
        self,
        urls: Sequence[str] = GOOGLE_JWKS_URLS,
        ttl: float = JWKS_CACHE_TTL,
        failure_ttl: float = JWKS_FAILURE_TTL,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.urls = tuple(urls)
        self.ttl = ttl
        self.failure_ttl = failure_ttl
        self._clock = clock
        self._keys: list[dict] = []
        self._fetched_at: float = 0
        self._failed_at: float | None = None

    def _refresh(self) -> list[dict]:
        now = self._clock()
        if self._keys and (now - self._fetched_at) < self.ttl:
            return self._keys
        if self._failed_at is not None and (now - self._failed_at) < self.failure_ttl:
            return self._keys

        keys: list[dict] = []
        for url in self.urls:
            try:
                response = httpx.get(url, timeout=10)
                response.raise_for_status()
                keys.extend(response.json().get("keys", []))
                logger.debug(f"Fetched JWKS from {url}")
            except Exception as e:
                logger.warning(f"Failed to fetch JWKS from {url}: {e}")

        if keys:
            self._keys = keys
            self._fetched_at = now
            self._failed_at = None
        else:
            logger.error(
                f"No JWKS keys loaded, serving {len(self._keys)} cached keys "
                f"and retrying in {self.failure_ttl:g}s"
            )
            self._failed_at = now
        return self._keys

    def __call__(self, kid: str | None, alg: str) -> Any:
        for key in self._refresh():
            if key.get("kid") == kid:
                return key
        logger.warning(f"No public key found for kid={kid}, alg={alg}")
        return None


class IAPVerifier:
    """
    Stateless verifier: (token, audience, environment) -> IAPUser | None.

    Never raises for bad tokens; every failure is logged and returns None.
    """

    def __init__(
        self,
        audience: str | None,
        environment: str,
        key_provider: KeyProvider | None = None,
        algorithms: Sequence[str] = DEFAULT_ALGORITHMS,
    ) -> None:
        self.audience = audience
        self.environment = environment
        self.key_provider = key_provider or JWKSKeyProvider()
        self.algorithms = list(algorithms)

    def verify(self, token: str) -> IAPUser | None:
        claims = self.verify_claims(token)
        if claims is None:
            return None
        return IAPUser.from_claims(claims)

    def verify_claims(self, token: str) -> dict | None:
        """
        Return the token's claims if it is acceptable, otherwise None.
        """
        if not token:
            return None

        if not self.audience:
            if self.environment == "development":
                logger.warning("IAP_AUDIENCE not configured: decoding IAP token WITHOUT verification")
                try:
                    return jwt.get_unverified_claims(token)
                except JWTError as e:
                    logger.warning(f"Could not decode IAP token: {e}")
                    return None
            logger.error("IAP_AUDIENCE not configured: rejecting IAP token")
            return None

        try:
            header = jwt.get_unverified_header(token)
            alg = header.get("alg", "")
            if alg not in self.algorithms:
                logger.warning(f"IAP token uses unexpected algorithm {alg}")
                return None

            key = self.key_provider(header.get("kid"), alg)
            if key is None:
                return None

            claims = jwt.decode(
                token,
                key,
                algorithms=self.algorithms,
                audience=self.audience,
            )
        except ExpiredSignatureError:
            logger.warning("IAP token has expired")
            return None
        except JWTError as e:
            logger.warning(f"IAP token validation failed: {e}")
            return None

        issuer = claims.get("iss")
        if issuer not in VALID_ISSUERS:
            logger.error(f"IAP token has invalid issuer: {issuer}")
            return None

        return claims

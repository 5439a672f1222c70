"""
Identity resolution.
Maps an optional bearer token to AuthenticatedUser or Anonymous.
"""
import asyncio
import logging
from typing import Optional

import firebase_admin
from firebase_admin import auth
from firebase_admin import exceptions as firebase_exceptions

from moviemood.core.exceptions import InvalidTokenError
from moviemood.models.interfaces import IdentityVerifier
from moviemood.models.schemas import ANONYMOUS, AuthenticatedUser, Identity

logger = logging.getLogger(__name__)

BEARER_PREFIX = "bearer "


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token of a 'Bearer <token>' header, None otherwise."""
    if not authorization:
        return None
    if not authorization.lower().startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX):].strip()
    return token or None


class FirebaseIdentityVerifier:
    """IdentityVerifier backed by Firebase Auth ID tokens."""

    def __init__(self, app: Optional[firebase_admin.App] = None, check_revoked: bool = False) -> None:
        self._app = app
        self._check_revoked = check_revoked

    async def verify(self, token: str) -> AuthenticatedUser:
        """Verify an ID token off the event loop."""
        try:
            claims = await asyncio.to_thread(
                auth.verify_id_token,
                token,
                app=self._app,
                check_revoked=self._check_revoked,
            )
        except (ValueError, firebase_exceptions.FirebaseError) as e:
            raise InvalidTokenError(reason=str(e)) from e

        return AuthenticatedUser(uid=claims["uid"], name=claims.get("name"))


class DisabledIdentityVerifier:
    """Rejects every token; all callers are anonymous."""

    async def verify(self, token: str) -> AuthenticatedUser:
        raise InvalidTokenError(reason="identity verification disabled")


async def resolve_identity(
    authorization: Optional[str],
    verifier: IdentityVerifier,
) -> Identity:
    """
    Resolve the caller identity for a request.

    Absence of a header means anonymous. A malformed header or a token that
    fails verification is logged and also treated as anonymous.
    """
    if not authorization:
        return ANONYMOUS

    token = extract_bearer_token(authorization)
    if token is None:
        logger.warning("Authorization header present without bearer token")
        return ANONYMOUS

    try:
        return await verifier.verify(token)
    except InvalidTokenError as e:
        logger.warning(f"Auth verification failed: {e.reason}")
        return ANONYMOUS

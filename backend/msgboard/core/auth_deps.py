from __future__ import annotations

import logging
from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from msgboard.core.tokens import (
    InvalidTokenError,
    TokenError,
    TokenExpiredError,
    TokenIssuer,
    TokenKind,
    TokenVerifier,
    VerifiedToken,
)


logger = logging.getLogger("api")
security = HTTPBearer(auto_error=False)

STATUS_INVALID_JWT = 40002
STATUS_JWT_EXPIRED = 40003
STATUS_INTERNAL = 50000


def get_token_issuer(request: Request) -> TokenIssuer:
    return request.app.state.token_issuer


def get_token_verifier(request: Request) -> TokenVerifier:
    return request.app.state.token_verifier


def token_http_error(err: TokenError) -> HTTPException:
    """Map a core token error onto the API's status codes."""
    if isinstance(err, InvalidTokenError):
        return HTTPException(status_code=401, detail={"status": STATUS_INVALID_JWT, "info": "invalid jwt"})
    if isinstance(err, TokenExpiredError):
        return HTTPException(status_code=401, detail={"status": STATUS_JWT_EXPIRED, "info": "jwt expired"})
    logger.error("Token processing failed", extra={"event": "token_internal_error", "detail": str(err)})
    return HTTPException(status_code=500, detail={"status": STATUS_INTERNAL, "info": "internal error"})


def verify_or_raise(verifier: TokenVerifier, token: str, kind: TokenKind) -> VerifiedToken:
    try:
        return verifier.verify(token, expected_kind=kind)
    except TokenError as e:
        raise token_http_error(e) from e


def require_user_id_dep(
    creds: HTTPAuthorizationCredentials | None = Depends(security),
    verifier: TokenVerifier = Depends(get_token_verifier),
) -> int:
    """
    Dependency: Authorization: Bearer <access token>.
    Returns the user id embedded in the token.
    """
    if creds is None or creds.scheme.lower() != "bearer":
        raise HTTPException(status_code=401, detail="Not authenticated")
    return verify_or_raise(verifier, creds.credentials, TokenKind.ACCESS).subject_id

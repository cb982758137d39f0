from __future__ import annotations

import logging
from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel
from sqlalchemy.orm import Session

from msgboard.core.auth_deps import (
    get_token_issuer,
    get_token_verifier,
    require_user_id_dep,
    token_http_error,
    verify_or_raise,
)
from msgboard.core.tokens import TokenError, TokenIssuer, TokenKind, TokenVerifier
from msgboard.db.database import get_db
from msgboard.db.models import User
from msgboard.services.accounts import (
    AccountError,
    AccountExistsError,
    InvalidCredentialsError,
    authenticate,
    register_account,
)


router = APIRouter(prefix="/user", tags=["user"])
logger = logging.getLogger("api")

STATUS_SUCCESS = 20000
INFO_SUCCESS = "success"


class RegisterIn(BaseModel):
    name: str
    email: str
    password: str


class LoginIn(BaseModel):
    email: str
    password: str


class RefreshIn(BaseModel):
    refresh_token: str


class TokenData(BaseModel):
    access_token: str
    refresh_token: str
    uid: int


class TokenResp(BaseModel):
    status: int = STATUS_SUCCESS
    info: str = INFO_SUCCESS
    data: TokenData


class MeOut(BaseModel):
    id: int
    name: str
    email: str


def _token_resp(issuer: TokenIssuer, uid: int) -> TokenResp:
    try:
        pair = issuer.issue_pair(uid)
    except TokenError as e:
        raise token_http_error(e) from e
    return TokenResp(
        data=TokenData(access_token=pair.access_token, refresh_token=pair.refresh_token, uid=uid),
    )


@router.post("/register", response_model=TokenResp)
def register(
    body: RegisterIn,
    db: Session = Depends(get_db),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> TokenResp:
    """Create an account and return its first token pair."""
    try:
        user = register_account(db, name=body.name, email=body.email, password=body.password)
    except AccountExistsError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except AccountError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _token_resp(issuer, user.id)


@router.post("/login", response_model=TokenResp)
def login(
    body: LoginIn,
    db: Session = Depends(get_db),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> TokenResp:
    try:
        user = authenticate(db, email=body.email, password=body.password)
    except InvalidCredentialsError as e:
        raise HTTPException(status_code=401, detail=str(e))
    return _token_resp(issuer, user.id)


@router.post("/token/refresh", response_model=TokenResp)
def refresh_tokens(
    body: RefreshIn,
    issuer: TokenIssuer = Depends(get_token_issuer),
    verifier: TokenVerifier = Depends(get_token_verifier),
) -> TokenResp:
    """Exchange a valid refresh token for a new pair."""
    verified = verify_or_raise(verifier, body.refresh_token, TokenKind.REFRESH)
    logger.debug("Tokens refreshed", extra={"event": "token_refreshed", "user_id": verified.subject_id})
    return _token_resp(issuer, verified.subject_id)


@router.get("/me", response_model=MeOut)
def get_me(
    response: Response,
    user_id: int = Depends(require_user_id_dep),
    db: Session = Depends(get_db),
) -> MeOut:
    user = db.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    response.headers["Cache-Control"] = "no-store"
    return MeOut(id=user.id, name=user.name, email=user.email)

"""
Signed access/refresh token pairs.

Wire form (three dot-separated segments, standard padded base64)::

    b64(header).b64(claims).b64(hex(HMAC-SHA256(key, b64(header) + b64(claims))))

The ``exp`` claim stores the validity window *length* in seconds, not an
absolute timestamp. A token is expired once ``now - iat`` exceeds it.
"""
from __future__ import annotations

import base64
import binascii
import enum
import hashlib
import hmac
import logging
import time
from typing import Callable, NamedTuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_serializer, field_validator
from pydantic_core import PydanticSerializationError


HEADER_PLAIN = '{"alg":"HS256","typ":"JWT"}'
SEPARATOR = "."
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

logger = logging.getLogger("auth")


class TokenError(Exception):
    """Base class for token issuance and verification failures."""


class InvalidTokenError(TokenError):
    """Malformed or forged token. Both cases share this error on purpose."""


class TokenExpiredError(TokenError):
    """Correctly signed token outside its validity window."""


class TokenInternalError(TokenError):
    """Claims could not be serialized or a signed payload could not be decoded."""


class TokenKind(enum.Enum):
    ACCESS = "access"
    REFRESH = "refresh"

    @property
    def wire_value(self) -> bool:
        return self is TokenKind.ACCESS

    @classmethod
    def from_wire(cls, value: bool) -> TokenKind:
        return cls.ACCESS if value else cls.REFRESH


class Claims(BaseModel):
    model_config = ConfigDict(frozen=True, strict=True, populate_by_name=True)

    issued_at: int = Field(alias="iat", ge=INT64_MIN, le=INT64_MAX)
    validity_window: int = Field(alias="exp", ge=INT64_MIN, le=INT64_MAX)  # seconds from issued_at
    subject_id: int = Field(alias="uid", ge=INT64_MIN, le=INT64_MAX)
    kind: TokenKind = Field(alias="is_access_token")

    @field_validator("kind", mode="before")
    @classmethod
    def _kind_from_wire(cls, value):
        if isinstance(value, TokenKind):
            return value
        if isinstance(value, bool):
            return TokenKind.from_wire(value)
        raise ValueError("is_access_token must be a boolean")

    @field_serializer("kind")
    def _kind_to_wire(self, kind: TokenKind) -> bool:
        return kind.wire_value

    def to_json(self) -> str:
        """Canonical compact JSON: iat, exp, uid, is_access_token."""
        return self.model_dump_json(by_alias=True)


class TokenConfig(BaseModel):
    """Signing key and windows, fixed for the lifetime of the process."""

    model_config = ConfigDict(frozen=True)

    key: bytes = Field(repr=False)
    access_window: int = Field(gt=0)
    refresh_multiplier: int = Field(10, ge=1)

    @property
    def refresh_window(self) -> int:
        return self.access_window * self.refresh_multiplier

    @classmethod
    def from_settings(cls, settings) -> TokenConfig:
        return cls(
            key=settings.jwt_key.encode("utf-8"),
            access_window=settings.jwt_timeout_seconds,
            refresh_multiplier=settings.jwt_refresh_multiplier,
        )


class TokenPair(NamedTuple):
    access_token: str
    refresh_token: str


class VerifiedToken(NamedTuple):
    subject_id: int
    kind: TokenKind


def _utf8(s: str) -> bytes:
    return s.encode("utf-8", "surrogatepass")


def _b64encode(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii")


HEADER_SEGMENT = _b64encode(HEADER_PLAIN.encode("utf-8"))


class Signer:
    def __init__(self, config: TokenConfig) -> None:
        self._key = config.key

    def sign(self, header_segment: str, payload_segment: str) -> str:
        """Signature segment over the still-encoded header and payload."""
        digest = hmac.new(self._key, _utf8(header_segment + payload_segment), hashlib.sha256).hexdigest()
        return _b64encode(digest.encode("ascii"))


class TokenIssuer:
    def __init__(self, config: TokenConfig, clock: Callable[[], float] = time.time) -> None:
        self._config = config
        self._signer = Signer(config)
        self._clock = clock

    def issue_pair(self, subject_id: int) -> TokenPair:
        """Access and refresh token for one user, minted at the same instant."""
        now = int(self._clock())
        try:
            access = Claims(
                issued_at=now,
                validity_window=self._config.access_window,
                subject_id=subject_id,
                kind=TokenKind.ACCESS,
            )
            refresh = Claims(
                issued_at=now,
                validity_window=self._config.refresh_window,
                subject_id=subject_id,
                kind=TokenKind.REFRESH,
            )
        except ValidationError as e:
            raise TokenInternalError("cannot build claims") from e

        pair = TokenPair(self.issue(access), self.issue(refresh))
        logger.debug("Token pair issued", extra={"event": "token_pair_issued", "user_id": subject_id, "iat": now})
        return pair

    def issue(self, claims: Claims) -> str:
        try:
            payload_json = claims.to_json()
        except PydanticSerializationError as e:
            raise TokenInternalError("cannot serialize claims") from e
        payload = _b64encode(payload_json.encode("utf-8"))
        return SEPARATOR.join((HEADER_SEGMENT, payload, self._signer.sign(HEADER_SEGMENT, payload)))


class TokenVerifier:
    """
    Accepts or rejects a presented token.

    Checks run in order and stop at the first failure:
    structure and signature (InvalidTokenError), claims decoding
    (TokenInternalError), expiry (TokenExpiredError).
    """

    def __init__(self, config: TokenConfig, clock: Callable[[], float] = time.time) -> None:
        self._signer = Signer(config)
        self._clock = clock

    def verify(self, token: str, expected_kind: TokenKind | None = None) -> VerifiedToken:
        if token.count(SEPARATOR) != 2:
            logger.info("Token rejected", extra={"event": "token_rejected", "reason": "structure"})
            raise InvalidTokenError("invalid jwt")

        header, payload, signature = token.split(SEPARATOR)
        expected = self._signer.sign(header, payload)
        # constant-time; same accept/reject result as plain string equality
        if not hmac.compare_digest(_utf8(expected), _utf8(signature)):
            logger.info("Token rejected", extra={"event": "token_rejected", "reason": "signature"})
            raise InvalidTokenError("invalid jwt")

        try:
            claims = Claims.model_validate_json(base64.b64decode(payload, validate=True))
        except (binascii.Error, ValueError) as e:
            # strict: missing or mistyped claims fail here instead of decoding as zero values
            logger.warning("Signed token has malformed claims", extra={"event": "token_decode_failed"})
            raise TokenInternalError("malformed claims") from e

        now = int(self._clock())
        if claims.validity_window < now - claims.issued_at:
            logger.info(
                "Token rejected",
                extra={"event": "token_rejected", "reason": "expired", "user_id": claims.subject_id},
            )
            raise TokenExpiredError("jwt expired")

        if expected_kind is not None and claims.kind is not expected_kind:
            logger.info(
                "Token rejected",
                extra={"event": "token_rejected", "reason": "kind", "user_id": claims.subject_id},
            )
            raise InvalidTokenError("unexpected token kind")

        return VerifiedToken(claims.subject_id, claims.kind)

"""
Authorization token model and its canonical encoding.

The encoding is the exact byte sequence the authority signs, so it has to
be stable: compact JSON, fixed key order, UTF-8.
"""
import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .errors import FormatError

SECONDS_PER_DAY = 24 * 60 * 60
DEFAULT_TRIAL_DAYS = 14

# Wire order of the encoded fields. Changing it invalidates every grant in the wild.
_FIELD_ORDER = ("user_id", "issued_at", "expires_at")


def require_utf8(value: str) -> str:
    """Rejects strings with lone surrogates, which have no UTF-8 encoding."""
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        raise ValueError("must be encodable as UTF-8")
    return value


class AuthorizationToken(BaseModel):
    model_config = ConfigDict(frozen=True, strict=True, extra="forbid")

    subject_id: str = Field(min_length=1)
    issued_at: int = Field(ge=0)
    expires_at: int = Field(ge=0)

    @field_validator("subject_id")
    @classmethod
    def check_subject(cls, value: str) -> str:
        return require_utf8(value)

    @model_validator(mode="after")
    def _check_window(self):
        if self.expires_at <= self.issued_at:
            raise ValueError("expires_at must be later than issued_at")
        return self


class SignedGrant(BaseModel):
    """The canonical token bytes and the detached signature over them."""

    model_config = ConfigDict(frozen=True)

    token_bytes: bytes
    signature: bytes

    @property
    def token_text(self) -> str:
        return self.token_bytes.decode("utf-8")

    @property
    def signature_hex(self) -> str:
        return self.signature.hex()


def encode(token: AuthorizationToken) -> bytes:
    payload = {
        "user_id": token.subject_id,
        "issued_at": token.issued_at,
        "expires_at": token.expires_at,
    }
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def decode(data: bytes) -> AuthorizationToken:
    """
    Parses canonical token bytes back into an AuthorizationToken.

    Raises FormatError for anything the authority would never have produced.
    """
    try:
        raw: Any = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        raise FormatError(f"Invalid token format: {e}")

    if not isinstance(raw, dict):
        raise FormatError("Invalid token format: expected a JSON object")
    if set(raw) != set(_FIELD_ORDER):
        raise FormatError(f"Invalid token format: expected fields {list(_FIELD_ORDER)}, got {sorted(raw)}")

    try:
        return AuthorizationToken(
            subject_id=raw["user_id"],
            issued_at=raw["issued_at"],
            expires_at=raw["expires_at"],
        )
    except ValidationError as e:
        raise FormatError(f"Invalid token format: {e.errors()[0]['msg']}")

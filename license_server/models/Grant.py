from pydantic import BaseModel, Field, field_validator

from trialguard.token import require_utf8

class IssueRequest(BaseModel):
    user_id: str = Field(min_length=1)

    @field_validator("user_id")
    @classmethod
    def user_id_is_utf8(cls, value: str) -> str:
        return require_utf8(value)

class GrantResponse(BaseModel):
    token: str # Canonical token text
    signature: str # Hex-encoded Ed25519 signature over the token bytes
    message: str

class CheckResponse(BaseModel):
    revoked: bool
    message: str

class MessageResponse(BaseModel):
    message: str

class PublicKeyResponse(BaseModel):
    public_key: str # Hex-encoded 32-byte Ed25519 key
    format: str = "ed25519"
    note: str = "Provision this key into every trial consumer out of band"

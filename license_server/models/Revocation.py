from sqlmodel import SQLModel, Field

class RevocationRecord(SQLModel, table=True):
    __tablename__ = "revocations"

    subject_id: str = Field(primary_key=True, description="Opaque identifier of the license holder.")
    revoked: bool = Field(default=False, description="Current revocation flag. Records are never deleted.")
    updated_at: int = Field(description="Unix time of the last revoke/unrevoke.")

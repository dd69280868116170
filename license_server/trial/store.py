import threading
import time
from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from trialguard.errors import AuthorityUnavailableError

from ..models.Revocation import RevocationRecord


class RevocationStore(Protocol):
    def set_revoked(self, subject_id: str, revoked: bool) -> None:
        ...

    def is_revoked(self, subject_id: str) -> bool:
        ...


class MemoryRevocationStore:
    """
    Process-lifetime revocation map behind a single lock.
    """

    def __init__(self):
        self._revoked: dict[str, bool] = {}
        self._lock = threading.Lock()

    def set_revoked(self, subject_id: str, revoked: bool) -> None:
        with self._lock:
            self._revoked[subject_id] = revoked

    def is_revoked(self, subject_id: str) -> bool:
        with self._lock:
            return self._revoked.get(subject_id, False)


class SQLRevocationStore:
    """
    Durable revocation map backed by the ``revocations`` table.

    Any database failure is reported as AuthorityUnavailableError so it is
    never mistaken for "not revoked".
    """

    def __init__(self, engine):
        self.engine = engine

    def set_revoked(self, subject_id: str, revoked: bool) -> None:
        try:
            with Session(self.engine) as session:
                record = session.get(RevocationRecord, subject_id)
                if record is None:
                    record = RevocationRecord(subject_id=subject_id, revoked=revoked, updated_at=int(time.time()))
                else:
                    record.revoked = revoked
                    record.updated_at = int(time.time())
                session.add(record)
                session.commit()
        except SQLAlchemyError as e:
            raise AuthorityUnavailableError(f"Revocation store unavailable: {e.__class__.__name__}")

    def is_revoked(self, subject_id: str) -> bool:
        try:
            with Session(self.engine) as session:
                record = session.get(RevocationRecord, subject_id)
        except SQLAlchemyError as e:
            raise AuthorityUnavailableError(f"Revocation store unavailable: {e.__class__.__name__}")
        return bool(record and record.revoked)

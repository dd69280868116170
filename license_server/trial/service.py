import time
from typing import Callable, Optional

from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from trialguard import crypto
from trialguard.events import EventSink, StructlogEventSink
from trialguard.token import DEFAULT_TRIAL_DAYS, SECONDS_PER_DAY, AuthorizationToken, SignedGrant, encode

from .store import MemoryRevocationStore, RevocationStore


class KeyAuthority:
    """
    Issues signed trial grants and owns revocation state.

    Args:
        signing_key: The authority's Ed25519 private key (never exposed)
        store: Revocation store, in-memory by default
        duration_days: Lifetime of every issued grant
        clock: Returns the current Unix time in seconds
        events: Sink for issued/revoked/unrevoked events
    """

    def __init__(
        self,
        signing_key: Ed25519PrivateKey,
        store: Optional[RevocationStore] = None,
        duration_days: int = DEFAULT_TRIAL_DAYS,
        clock: Optional[Callable[[], int]] = None,
        events: Optional[EventSink] = None,
    ):
        if duration_days <= 0:
            raise ValueError("duration_days must be positive")
        self._signing_key = signing_key
        self._public_key = crypto.public_key_bytes(signing_key)
        self.store = store or MemoryRevocationStore()
        self.duration_seconds = duration_days * SECONDS_PER_DAY
        self.clock = clock or (lambda: int(time.time()))
        self.events = events or StructlogEventSink("license_server")

    def issue(self, subject_id: str) -> SignedGrant:
        if not subject_id:
            raise ValueError("subject_id cannot be empty")

        now = self.clock()
        trial = AuthorizationToken(
            subject_id=subject_id,
            issued_at=now,
            expires_at=now + self.duration_seconds,
        )
        token_bytes = encode(trial)
        grant = SignedGrant(token_bytes=token_bytes, signature=crypto.sign(self._signing_key, token_bytes))

        self.events.emit("grant.issued", subject_id=subject_id, issued_at=trial.issued_at, expires_at=trial.expires_at)
        return grant

    def revoke(self, subject_id: str) -> None:
        self.store.set_revoked(subject_id, True)
        self.events.emit("subject.revoked", subject_id=subject_id)

    def unrevoke(self, subject_id: str) -> None:
        self.store.set_revoked(subject_id, False)
        self.events.emit("subject.unrevoked", subject_id=subject_id)

    def is_revoked(self, subject_id: str) -> bool:
        return self.store.is_revoked(subject_id)

    def public_key(self) -> bytes:
        return self._public_key

    @property
    def duration_days(self) -> int:
        return self.duration_seconds // SECONDS_PER_DAY

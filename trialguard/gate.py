"""
Revocation gate: online revocation check with a bounded offline grace period.

The grace window is measured from the last *successful* online check, so
failing to connect never extends it. A confirmed revocation always denies,
whatever the grace state.
"""
import enum
import os
import tempfile
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Protocol

from .errors import AuthorityUnreachableError, LivenessError, RevokedError
from .events import EventSink, StructlogEventSink

SECONDS_PER_HOUR = 60 * 60
DEFAULT_GRACE_HOURS = 24
DEFAULT_CHECK_TIMEOUT = 5.0


class GateState(str, enum.Enum):
    ONLINE_VERIFIED = "online_verified"
    GRACE_PERIOD_ACTIVE = "grace_period_active"
    GRACE_PERIOD_EXPIRED = "grace_period_expired"
    REVOKED = "revoked"
    UNREACHABLE = "unreachable"


@dataclass(frozen=True)
class GateOutcome:
    subject_id: str
    state: GateState
    hours_remaining: Optional[int] = None
    hours_since_check: Optional[int] = None

    @property
    def admitted(self) -> bool:
        return self.state in (GateState.ONLINE_VERIFIED, GateState.GRACE_PERIOD_ACTIVE)

    def raise_for_denial(self) -> None:
        if self.state == GateState.REVOKED:
            raise RevokedError(self.subject_id)
        if self.state == GateState.UNREACHABLE:
            raise LivenessError()
        if self.state == GateState.GRACE_PERIOD_EXPIRED:
            raise LivenessError(self.hours_since_check)


class LastCheckStore(Protocol):
    def read(self) -> Optional[int]:
        ...

    def record(self, timestamp: int) -> None:
        ...

    def clear(self) -> None:
        ...


class MemoryLastCheckStore:
    def __init__(self, timestamp: Optional[int] = None):
        self._timestamp = timestamp
        self._lock = threading.Lock()

    def read(self) -> Optional[int]:
        with self._lock:
            return self._timestamp

    def record(self, timestamp: int) -> None:
        with self._lock:
            self._timestamp = timestamp

    def clear(self) -> None:
        with self._lock:
            self._timestamp = None


class FileLastCheckStore:
    """
    Persists the last successful check as decimal seconds in a text file.

    Writes go to a temporary file that is renamed over the target, so a
    concurrent reader sees either the old or the new value. An unreadable
    file counts as no check at all.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = threading.Lock()

    def read(self) -> Optional[int]:
        with self._lock:
            try:
                content = self.path.read_text(encoding="utf-8").strip()
            except FileNotFoundError:
                return None
            if not content.isdigit():
                return None
            return int(content)

    def record(self, timestamp: int) -> None:
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=self.path.name, suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(str(timestamp))
                os.replace(tmp_path, self.path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise

    def clear(self) -> None:
        with self._lock:
            if self.path.exists():
                self.path.unlink()


class RevocationGate:
    """
    Reconciles online revocation status with the offline grace period.

    Args:
        checker: Returns True if the subject is revoked; raises
            AuthorityUnreachableError when the authority cannot answer
        store: Where the last successful online check is kept
        grace_hours: Offline allowance in hours, 0 disables it
        timeout: Deadline in seconds for the whole online check
    """

    def __init__(
        self,
        checker: Callable[[str], bool],
        store: LastCheckStore,
        grace_hours: int = DEFAULT_GRACE_HOURS,
        timeout: float = DEFAULT_CHECK_TIMEOUT,
        events: Optional[EventSink] = None,
    ):
        if grace_hours < 0:
            raise ValueError("grace_hours cannot be negative")
        self.checker = checker
        self.store = store
        self.grace_seconds = grace_hours * SECONDS_PER_HOUR
        self.timeout = timeout
        self.events = events or StructlogEventSink()

    def check(self, subject_id: str, now: Optional[int] = None) -> GateOutcome:
        try:
            revoked = self._check_online(subject_id)
        except AuthorityUnreachableError as e:
            self.events.emit("gate.unreachable", subject_id=subject_id, reason=e.code, detail=e.message)
            return self._offline_outcome(subject_id, self._now(now))

        now = self._now(now)
        if revoked:
            self.store.clear()
            return GateOutcome(subject_id, GateState.REVOKED)

        self.store.record(now)
        return GateOutcome(subject_id, GateState.ONLINE_VERIFIED)

    def _check_online(self, subject_id: str) -> bool:
        result = {}

        def call_checker():
            try:
                result["revoked"] = self.checker(subject_id)
            except Exception as e:
                result["error"] = e

        # daemon, so a checker that never returns cannot keep the process alive
        worker = threading.Thread(target=call_checker, name="revocation-check", daemon=True)
        worker.start()
        worker.join(self.timeout)
        if worker.is_alive():
            raise AuthorityUnreachableError(f"No answer from the license server within {self.timeout}s")
        if "error" in result:
            raise result["error"]
        return result["revoked"]

    def _offline_outcome(self, subject_id: str, now: int) -> GateOutcome:
        last_check = self.store.read()
        if self.grace_seconds == 0 or last_check is None or last_check > now:
            return GateOutcome(subject_id, GateState.UNREACHABLE)

        elapsed = now - last_check
        if elapsed <= self.grace_seconds:
            return GateOutcome(
                subject_id,
                GateState.GRACE_PERIOD_ACTIVE,
                hours_remaining=(self.grace_seconds - elapsed) // SECONDS_PER_HOUR,
                hours_since_check=elapsed // SECONDS_PER_HOUR,
            )
        return GateOutcome(
            subject_id,
            GateState.GRACE_PERIOD_EXPIRED,
            hours_since_check=elapsed // SECONDS_PER_HOUR,
        )

    @staticmethod
    def _now(now: Optional[int]) -> int:
        return int(time.time()) if now is None else now

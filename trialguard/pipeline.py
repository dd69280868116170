"""
Consumer-side verification of a signed grant.

Order is fixed: authenticate the raw bytes, then parse, then check expiry,
then ask the revocation gate. Token fields are untrusted until the
signature has been checked.
"""
import time
from dataclasses import dataclass
from typing import Callable, Optional

from . import crypto, token as token_codec, validator
from .errors import AuthenticityError, TrialGuardError
from .events import EventSink, StructlogEventSink
from .gate import GateOutcome, RevocationGate
from .token import AuthorizationToken


@dataclass(frozen=True)
class LicenseStatus:
    token: AuthorizationToken
    days_remaining: int
    gate: GateOutcome


class GrantVerifier:
    def __init__(
        self,
        public_key: bytes,
        gate: RevocationGate,
        clock: Optional[Callable[[], int]] = None,
        events: Optional[EventSink] = None,
    ):
        self.public_key = public_key
        self.gate = gate
        self.clock = clock or (lambda: int(time.time()))
        self.events = events or StructlogEventSink()

    def verify(self, token_text: str, signature_hex: str) -> LicenseStatus:
        """
        Runs the full pipeline and returns the admitted license status.

        Raises the TrialGuardError subclass describing the first failure.
        """
        try:
            status = self._verify(token_text, signature_hex)
        except TrialGuardError as e:
            self.events.emit("grant.denied", reason=e.code, detail=e.message, **e.details)
            raise
        self.events.emit(
            "grant.admitted",
            subject_id=status.token.subject_id,
            days_remaining=status.days_remaining,
            gate_state=status.gate.state.value,
        )
        return status

    def _verify(self, token_text: str, signature_hex: str) -> LicenseStatus:
        signature = crypto.decode_signature_hex(signature_hex)
        message = token_text.strip().encode("utf-8")

        if not crypto.verify(message, signature, self.public_key):
            raise AuthenticityError()

        trial = token_codec.decode(message)
        now = self.clock()
        validator.validate(trial, now)

        outcome = self.gate.check(trial.subject_id, now)
        outcome.raise_for_denial()

        return LicenseStatus(
            token=trial,
            days_remaining=validator.days_remaining(trial, now),
            gate=outcome,
        )

"""
Error taxonomy shared by the license server and the trial consumer.

Every error carries a stable code, a human readable message and a dict of
structured details so the top-level decision point can print something
actionable without parsing strings.
"""
from typing import Any, Dict, Optional


class TrialGuardError(Exception):
    """Base exception for all TrialGuard errors."""

    code = "TRIALGUARD_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class FormatError(TrialGuardError):
    """Missing or corrupt artifact, wrong-length signature, undecodable token."""

    code = "FORMAT_ERROR"


class ConfigurationError(TrialGuardError):
    """A local setting is missing or unusable."""

    code = "CONFIGURATION"


class KeyConfigurationError(ConfigurationError):
    """The configured public (or signing) key is unusable."""

    code = "KEY_CONFIGURATION"


class AuthenticityError(TrialGuardError):
    code = "AUTHENTICITY"

    def __init__(self, message: str = "Signature verification failed! Token was not issued by the authorized license server."):
        super().__init__(message)


class ExpiredError(TrialGuardError):
    code = "EXPIRED"

    def __init__(self, days_overdue: int):
        self.days_overdue = days_overdue
        super().__init__(
            f"Your trial expired {days_overdue} days ago. Please contact support to upgrade.",
            {"days_overdue": days_overdue},
        )


class RevokedError(TrialGuardError):
    code = "REVOKED"

    def __init__(self, subject_id: str):
        self.subject_id = subject_id
        super().__init__(
            "Your trial has been revoked by the license server.",
            {"subject_id": subject_id},
        )


class LivenessError(TrialGuardError):
    """
    The authority could not be reached and no offline allowance applies.

    ``hours_since_check`` is None when no successful online check was ever
    recorded (or the recorded one cannot be trusted).
    """

    code = "LIVENESS"

    def __init__(self, hours_since_check: Optional[int] = None):
        self.hours_since_check = hours_since_check
        if hours_since_check is None:
            message = "No previous online check found. Please connect to the internet to verify your license."
        else:
            message = (
                f"Last online check was {hours_since_check} hours ago. "
                "Please connect to the internet to verify your license."
            )
        super().__init__(message, {"hours_since_check": hours_since_check})


class AuthorityUnavailableError(TrialGuardError):
    """Raised on the authority side when its backing store cannot answer."""

    code = "AUTHORITY_UNAVAILABLE"


class AuthorityUnreachableError(TrialGuardError):
    """Raised on the consumer side when the authority cannot be reached."""

    code = "AUTHORITY_UNREACHABLE"


class MalformedResponseError(AuthorityUnreachableError):
    """The authority answered, but not with a usable revocation status."""

    code = "MALFORMED_RESPONSE"

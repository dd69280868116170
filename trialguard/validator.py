from .errors import ExpiredError
from .token import SECONDS_PER_DAY, AuthorizationToken


def validate(token: AuthorizationToken, now: int) -> AuthorizationToken:
    """
    Enforces expiry. The token must come from signature-verified bytes.

    A token is valid strictly before ``expires_at``; at or after it the
    token is expired and ExpiredError reports whole days overdue.
    """
    if now >= token.expires_at:
        raise ExpiredError((now - token.expires_at) // SECONDS_PER_DAY)
    return token


def days_remaining(token: AuthorizationToken, now: int) -> int:
    return max(token.expires_at - now, 0) // SECONDS_PER_DAY

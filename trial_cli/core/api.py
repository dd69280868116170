import requests
from typing import Optional, Tuple

from trialguard.errors import AuthorityUnreachableError, MalformedResponseError

from . import config


def _admin_headers(admin_key: Optional[str]) -> dict:
    return {"X-Admin-Key": admin_key} if admin_key else {}


def api_issue_trial(user_id: str) -> Optional[Tuple[str, str]]:
    """
    Requests a new trial grant.
    Returns (token_text, signature_hex) or None on failure.
    """
    url = f"{config.BASE_URL}/api/trial/issue"
    try:
        resp = requests.post(url, json={"user_id": user_id}, timeout=10)
        if resp.status_code != 200:
            return None
        data = resp.json()
        return data["token"], data["signature"]
    except (requests.RequestException, ValueError, KeyError, TypeError):
        return None


def api_check_revocation(user_id: str, timeout: Optional[float] = None) -> bool:
    """
    Asks the license server whether the user has been revoked.

    Raises:
        AuthorityUnreachableError: the server could not be reached
        MalformedResponseError: the server answered without a usable status
    """
    if timeout is None:
        timeout = config.check_timeout()
    url = f"{config.BASE_URL}/api/trial/check"
    try:
        resp = requests.get(url, params={"user_id": user_id}, timeout=timeout)
    except requests.RequestException as e:
        raise AuthorityUnreachableError(f"Could not reach license server: {e}")

    if resp.status_code != 200:
        raise MalformedResponseError(f"License server returned status {resp.status_code}")
    try:
        data = resp.json()
    except ValueError as e:
        raise MalformedResponseError(f"Could not parse server response: {e}")

    revoked = data.get("revoked") if isinstance(data, dict) else None
    if not isinstance(revoked, bool):
        raise MalformedResponseError("Server response has no boolean 'revoked' field")
    return revoked


def api_get_public_key() -> Optional[str]:
    url = f"{config.BASE_URL}/api/public-key"
    try:
        resp = requests.get(url, timeout=10)
        if resp.status_code != 200:
            return None
        return resp.json().get("public_key")
    except (requests.RequestException, ValueError, AttributeError):
        return None


def api_set_revoked(user_id: str, revoked: bool, admin_key: Optional[str] = None) -> bool:
    """
    Revokes (or restores) a user's trial. Admin only when the server has an admin key.
    """
    action = "revoke" if revoked else "unrevoke"
    url = f"{config.BASE_URL}/api/trial/{action}"
    try:
        resp = requests.post(url, json={"user_id": user_id}, headers=_admin_headers(admin_key), timeout=10)
        return resp.status_code == 200
    except requests.RequestException:
        return False

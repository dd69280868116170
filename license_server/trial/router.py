from typing import Annotated

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from trialguard.crypto import KEY_FORMAT
from trialguard.errors import AuthorityUnavailableError

from ..core.security import verify_admin_key
from ..models.Grant import CheckResponse, GrantResponse, IssueRequest, MessageResponse, PublicKeyResponse
from .service import KeyAuthority

router = APIRouter(prefix="/api", tags=["trial"])


def get_authority(request: Request) -> KeyAuthority:
    return request.app.state.authority


def require_admin(request: Request, x_admin_key: Annotated[str | None, Header()] = None):
    admin_key_hash = request.app.state.admin_key_hash
    if admin_key_hash is None:
        return

    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or missing admin key",
    )
    if not x_admin_key:
        raise credentials_exception
    try:
        valid = verify_admin_key(x_admin_key, admin_key_hash)
    except ValueError:
        # malformed ADMIN_KEY_HASH in the server configuration
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Admin key misconfigured")
    if not valid:
        raise credentials_exception


def _unavailable(e: AuthorityUnavailableError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.message)


@router.post("/trial/issue", response_model=GrantResponse)
def issue_trial(data: IssueRequest, authority: KeyAuthority = Depends(get_authority)):
    """
    Issue a new signed trial grant for a user.
    """
    grant = authority.issue(data.user_id)
    return GrantResponse(
        token=grant.token_text,
        signature=grant.signature_hex,
        message=f"Trial issued for {data.user_id} ({authority.duration_days} days)",
    )


@router.get("/trial/check", response_model=CheckResponse)
def check_revocation(user_id: str, authority: KeyAuthority = Depends(get_authority)):
    """
    Report whether a user's trial has been revoked.
    """
    try:
        revoked = authority.is_revoked(user_id)
    except AuthorityUnavailableError as e:
        raise _unavailable(e)

    message = f"User {user_id} has been revoked" if revoked else f"User {user_id} is active"
    return CheckResponse(revoked=revoked, message=message)


@router.post("/trial/revoke", response_model=MessageResponse, dependencies=[Depends(require_admin)])
def revoke_trial(data: IssueRequest, authority: KeyAuthority = Depends(get_authority)):
    try:
        authority.revoke(data.user_id)
    except AuthorityUnavailableError as e:
        raise _unavailable(e)
    return MessageResponse(message=f"Trial revoked for {data.user_id}")


@router.post("/trial/unrevoke", response_model=MessageResponse, dependencies=[Depends(require_admin)])
def unrevoke_trial(data: IssueRequest, authority: KeyAuthority = Depends(get_authority)):
    try:
        authority.unrevoke(data.user_id)
    except AuthorityUnavailableError as e:
        raise _unavailable(e)
    return MessageResponse(message=f"Trial restored for {data.user_id}")


@router.get("/public-key", response_model=PublicKeyResponse)
def get_public_key(authority: KeyAuthority = Depends(get_authority)):
    return PublicKeyResponse(public_key=authority.public_key().hex(), format=KEY_FORMAT)

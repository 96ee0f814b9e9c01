from typing import Optional

from fastapi import Header, HTTPException

OWNER_HEADER = "X-Owner-Id"


def get_current_owner(x_owner_id: Optional[str] = Header(None, alias=OWNER_HEADER)) -> str:
    """
    The upstream auth layer authenticates the request and forwards the user id.
    It is trusted as-is here.
    """
    if not x_owner_id or not x_owner_id.strip():
        raise HTTPException(
            status_code=401,
            detail={"code": "UNAUTHORIZED", "message": "Authentication required"},
        )
    return x_owner_id.strip()

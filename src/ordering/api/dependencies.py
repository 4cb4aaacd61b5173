"""Request-scoped dependencies: services, the calling shopper, admin access.

Authentication is owned by the session layer in front of this API. It
forwards the resolved identity as ``X-Shopper-Id`` (signed-in) or
``X-Guest-Id`` (anonymous).
"""

import hmac
import os
from dataclasses import dataclass

from fastapi import Depends, Header, HTTPException, Request

from ordering.services import StorefrontServices


@dataclass(frozen=True)
class Shopper:
    shopper_id: str
    is_guest: bool


def get_services(request: Request) -> StorefrontServices:
    return request.app.state.services


def get_shopper(
    x_shopper_id: str | None = Header(default=None),
    x_guest_id: str | None = Header(default=None),
) -> Shopper:
    if x_shopper_id:
        return Shopper(shopper_id=x_shopper_id, is_guest=False)
    if x_guest_id:
        return Shopper(shopper_id=x_guest_id, is_guest=True)
    raise HTTPException(status_code=401, detail="Missing shopper session")


def get_registered_shopper(shopper: Shopper = Depends(get_shopper)) -> Shopper:
    if shopper.is_guest:
        raise HTTPException(status_code=401, detail="Please sign in to continue")
    return shopper


def get_session_guest_id(x_guest_id: str | None = Header(default=None)) -> str:
    """The guest cart id the session layer still holds for a shopper who just signed in."""
    if not x_guest_id:
        raise HTTPException(status_code=400, detail="No guest cart on this session")
    return x_guest_id


def require_admin(x_admin_token: str | None = Header(default=None)) -> None:
    expected = os.getenv("ADMIN_API_TOKEN")
    if not expected or not x_admin_token or not hmac.compare_digest(expected, x_admin_token):
        raise HTTPException(status_code=403, detail="Admin access required")

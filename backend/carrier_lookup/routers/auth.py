"""Auth routes for the demo accounts.

Route overview:
  POST /login  — username + password → bearer token
  GET  /me     — the current account
"""

from fastapi import APIRouter, Depends, HTTPException, status

from carrier_lookup.auth.deps import DemoUser, authenticate, get_current_user
from carrier_lookup.auth.jwt import create_access_token
from carrier_lookup.schemas.auth import LoginRequest, TokenResponse, UserOut

router = APIRouter()


def _build_user_out(user: DemoUser) -> UserOut:
    return UserOut(
        id=user.id,
        username=user.username,
        name=user.name,
        email=user.email,
        role=user.role.value,
    )


@router.post("/login", response_model=TokenResponse)
async def login(body: LoginRequest):
    user = authenticate(body.username, body.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
        )
    return TokenResponse(
        access_token=create_access_token(user_id=user.id, role=user.role.value),
        user=_build_user_out(user),
    )


@router.get("/me", response_model=UserOut)
async def me(user: DemoUser = Depends(get_current_user)):
    return _build_user_out(user)

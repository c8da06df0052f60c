from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..schemas import (
    AccountOut,
    AuthPayload,
    Envelope,
    ForgotPasswordRequest,
    LoginRequest,
    MessagePayload,
    RegisterRequest,
    ResetPasswordRequest,
    ResetTokenPayload,
    TokenClaims,
)
from ..security import get_current_claims
from ..services import accounts

router = APIRouter()


def _auth_payload(result: accounts.AuthResult) -> AuthPayload:
    return AuthPayload(user=AccountOut.model_validate(result.account), token=result.token)


@router.post("/register", response_model=Envelope[AuthPayload], status_code=status.HTTP_201_CREATED)
async def register(body: RegisterRequest, db: AsyncSession = Depends(get_db)):
    result = await accounts.register(db, body.email, body.password, body.name)
    return Envelope(data=_auth_payload(result))


@router.post("/login", response_model=Envelope[AuthPayload])
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)):
    result = await accounts.login(db, body.email, body.password)
    return Envelope(data=_auth_payload(result))


@router.post("/forgot-password", response_model=Envelope[ResetTokenPayload])
async def forgot_password(body: ForgotPasswordRequest, db: AsyncSession = Depends(get_db)):
    token = await accounts.request_password_reset(db, body.email)
    return Envelope(data=ResetTokenPayload(reset_token=token))


@router.post("/reset-password", response_model=Envelope[MessagePayload])
async def reset_password(body: ResetPasswordRequest, db: AsyncSession = Depends(get_db)):
    await accounts.reset_password(db, body.token, body.new_password)
    return Envelope(data=MessagePayload(message="Password updated"))


@router.get("/verify-token", response_model=Envelope[TokenClaims])
async def verify_token(claims: dict = Depends(get_current_claims)):
    return Envelope(data=TokenClaims(user_id=int(claims["sub"]), email=claims["email"]))


@router.get("/profile", response_model=Envelope[AccountOut])
async def profile(claims: dict = Depends(get_current_claims), db: AsyncSession = Depends(get_db)):
    account = await accounts.get_profile(db, int(claims["sub"]))
    return Envelope(data=AccountOut.model_validate(account))

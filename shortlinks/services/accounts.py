"""Email/password accounts: registration, login and password reset."""

import logging
import re
from dataclasses import dataclass
from typing import Optional

import validators
from argon2 import PasswordHasher
from argon2.exceptions import VerificationError, InvalidHashError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from .. import crud
from ..errors import (
    EmailTakenError,
    InvalidCredentialsError,
    InvalidEmailError,
    InvalidTokenError,
    NotFoundError,
    WeakPasswordError,
)
from ..models import Account
from ..security import RESET_PURPOSE, create_access_token, create_reset_token, decode_token

logger = logging.getLogger(__name__)

_hasher = PasswordHasher()

MAX_EMAIL_LENGTH = 320
MIN_PASSWORD_LENGTH = 8
DEFAULT_NAME = "User"


@dataclass
class AuthResult:
    account: Account
    token: str


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def validate_email(email: str) -> str:
    email = normalize_email(email)
    if not email or validators.email(email) is not True:
        raise InvalidEmailError()
    if len(email) > MAX_EMAIL_LENGTH:
        raise InvalidEmailError("Email address is too long")
    return email


def validate_password(password: str):
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise WeakPasswordError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    if not re.search(r"[a-z]", password):
        raise WeakPasswordError("Password must contain a lowercase letter")
    if not re.search(r"[A-Z]", password):
        raise WeakPasswordError("Password must contain an uppercase letter")
    if not re.search(r"\d", password):
        raise WeakPasswordError("Password must contain a digit")


async def _verify(password_hash: str, password: str) -> bool:
    try:
        return await run_in_threadpool(_hasher.verify, password_hash, password)
    except (VerificationError, InvalidHashError):
        return False


async def register(db: AsyncSession, email: str, password: str, name: Optional[str] = None) -> AuthResult:
    email = validate_email(email)
    validate_password(password)

    if await crud.get_account_by_email(db, email):
        raise EmailTakenError()

    password_hash = await run_in_threadpool(_hasher.hash, password)
    try:
        account = await crud.create_account(
            db, Account(email=email, password_hash=password_hash, name=name or DEFAULT_NAME, is_active=True)
        )
    except IntegrityError:
        await db.rollback()
        raise EmailTakenError()

    logger.info(f"Registered account {account.id}")
    return AuthResult(account=account, token=create_access_token(account.id, account.email))


async def login(db: AsyncSession, email: str, password: str) -> AuthResult:
    email = validate_email(email)
    if not password:
        raise InvalidCredentialsError("Password is required")

    account = await crud.get_account_by_email(db, email)
    # Same error for unknown email and wrong password
    if account is None or not account.is_active:
        raise InvalidCredentialsError()
    if not await _verify(account.password_hash, password):
        raise InvalidCredentialsError()

    return AuthResult(account=account, token=create_access_token(account.id, account.email))


async def request_password_reset(db: AsyncSession, email: str) -> str:
    email = validate_email(email)
    account = await crud.get_account_by_email(db, email)
    if account is None or not account.is_active:
        raise NotFoundError("No account is registered with this email address")
    # TODO: deliver the token by email instead of returning it to the caller
    return create_reset_token(email)


async def reset_password(db: AsyncSession, token: str, new_password: str):
    claims = decode_token(token, purpose=RESET_PURPOSE)
    validate_password(new_password)

    password_hash = await run_in_threadpool(_hasher.hash, new_password)
    if not await crud.update_account_password(db, claims["email"], password_hash):
        raise InvalidTokenError("Account not found or password could not be updated")
    logger.info("Password reset completed")


async def get_profile(db: AsyncSession, account_id: int) -> Account:
    account = await crud.get_account_by_id(db, account_id)
    if account is None or not account.is_active:
        raise NotFoundError("Account not found")
    return account

import pytest
from datetime import timedelta

from shortlinks import security
from shortlinks.errors import (
    EmailTakenError,
    InvalidCredentialsError,
    InvalidEmailError,
    InvalidTokenError,
    NotFoundError,
    WeakPasswordError,
)
from shortlinks.services import accounts


@pytest.mark.parametrize("password", ["Short1", "alllowercase1", "ALLUPPERCASE1", "NoDigitsHere"])
def test_weak_passwords_rejected(password):
    with pytest.raises(WeakPasswordError):
        accounts.validate_password(password)


def test_email_is_normalized():
    assert accounts.validate_email("  Alice@Example.COM ") == "alice@example.com"


@pytest.mark.parametrize("email", ["", "not-an-email", "a@b"])
def test_bad_emails_rejected(email):
    with pytest.raises(InvalidEmailError):
        accounts.validate_email(email)


@pytest.mark.asyncio
async def test_register_then_login(db):
    registered = await accounts.register(db, "Alice@Example.com", "Secret123", "Alice")
    assert registered.account.email == "alice@example.com"
    assert registered.account.password_hash != "Secret123"

    claims = security.decode_token(registered.token)
    assert claims["sub"] == str(registered.account.id)

    logged_in = await accounts.login(db, "alice@example.com", "Secret123")
    assert logged_in.account.id == registered.account.id


@pytest.mark.asyncio
async def test_register_duplicate_email(db):
    await accounts.register(db, "alice@example.com", "Secret123")
    with pytest.raises(EmailTakenError):
        await accounts.register(db, "ALICE@example.com", "Secret456")


@pytest.mark.asyncio
async def test_login_failures_look_the_same(db):
    await accounts.register(db, "alice@example.com", "Secret123")

    with pytest.raises(InvalidCredentialsError) as wrong_password:
        await accounts.login(db, "alice@example.com", "Wrong1234")
    with pytest.raises(InvalidCredentialsError) as unknown_email:
        await accounts.login(db, "nobody@example.com", "Secret123")
    assert wrong_password.value.message == unknown_email.value.message


@pytest.mark.asyncio
async def test_password_reset_flow(db):
    await accounts.register(db, "alice@example.com", "Secret123")

    token = await accounts.request_password_reset(db, "alice@example.com")
    await accounts.reset_password(db, token, "NewSecret456")

    await accounts.login(db, "alice@example.com", "NewSecret456")
    with pytest.raises(InvalidCredentialsError):
        await accounts.login(db, "alice@example.com", "Secret123")


@pytest.mark.asyncio
async def test_reset_for_unknown_email(db):
    with pytest.raises(NotFoundError):
        await accounts.request_password_reset(db, "nobody@example.com")


@pytest.mark.asyncio
async def test_access_token_cannot_reset_password(db):
    registered = await accounts.register(db, "alice@example.com", "Secret123")
    with pytest.raises(InvalidTokenError):
        await accounts.reset_password(db, registered.token, "NewSecret456")


def test_expired_token_rejected():
    token = security.create_token(
        {"sub": "1", "email": "a@example.com", "purpose": security.ACCESS_PURPOSE},
        timedelta(seconds=-1),
    )
    with pytest.raises(InvalidTokenError):
        security.decode_token(token)


def test_reset_token_is_not_an_access_token():
    token = security.create_reset_token("a@example.com")
    with pytest.raises(InvalidTokenError):
        security.decode_token(token)
    assert security.get_optional_owner_id(
        security.HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)
    ) is None

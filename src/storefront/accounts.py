"""Customer registration/login and admin credential checks."""

import hmac
import logging

from passlib.context import CryptContext

from . import config
from .errors import InvalidCredentialsError, InvalidRegistrationError
from .models import User
from .user_store import UserStore

logger = logging.getLogger(__name__)

# scrypt with N=2**14, r=8, p=1
pwd_context = CryptContext(schemes=["scrypt"], deprecated="auto", scrypt__rounds=14)


def hash_password(password: str) -> str:
    """Hash a password. Returns a "$scrypt$..." modular crypt string."""
    return pwd_context.hash(password)


def verify_password(password: str, stored: str | None) -> bool:
    """Check a password against a hash produced by hash_password()."""
    if not stored:
        return False
    try:
        return pwd_context.verify(password, stored)
    except ValueError:
        # Not a hash this context recognizes
        return False


def register_user(store: UserStore, name: str, email: str, password: str) -> User:
    """
    Create a customer account.

    Raises:
        InvalidRegistrationError: If a field is missing or the password is short.
        UserExistsError: If the email is already registered.
    """
    name = (name or "").strip()
    email = (email or "").strip().lower()
    password = password or ""

    if not name or not email or not password:
        raise InvalidRegistrationError("name, email and password are required")
    if len(password) < config.MIN_PASSWORD_LENGTH:
        raise InvalidRegistrationError(
            f"password must be at least {config.MIN_PASSWORD_LENGTH} characters"
        )

    user = store.create_user(name=name, email=email, password_hash=hash_password(password))
    logger.info("Registered user #%s", user.id)
    return user


def authenticate(store: UserStore, email: str, password: str) -> User:
    """
    Look up a customer by email and check the password.

    Raises:
        InvalidCredentialsError: If the email is unknown or the password is wrong.
    """
    user = store.get_user_by_email(email)
    if user is None or not verify_password(password or "", user.password_hash):
        raise InvalidCredentialsError()
    return user


def check_admin_credentials(
    username: str,
    password: str,
    expected_user: str | None = None,
    expected_password: str | None = None,
) -> bool:
    """Compare admin credentials against the configured ones."""
    expected_user = expected_user if expected_user is not None else config.ADMIN_USER
    expected_password = (
        expected_password if expected_password is not None else config.ADMIN_PASSWORD
    )
    user_ok = hmac.compare_digest(username.encode("utf-8"), expected_user.encode("utf-8"))
    password_ok = hmac.compare_digest(
        password.encode("utf-8"), expected_password.encode("utf-8")
    )
    return user_ok and password_ok

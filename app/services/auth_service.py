"""
Credential Service

Registers users, verifies email/password pairs and mints signed tokens.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
import logging

import bcrypt
import jwt
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.errors import DuplicateIdentity, InvalidCredentials
from app.middleware.auth import JWT_ALGORITHM, JWT_EXPIRES_SECONDS, JWT_SECRET
from app.models.user import User

logger = logging.getLogger(__name__)

BCRYPT_ROUNDS = 10


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Not a bcrypt hash, or a password longer than bcrypt accepts
        return False


def create_access_token(user_id: str, expires_in: int = JWT_EXPIRES_SECONDS) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "iat": now,
        "exp": now + timedelta(seconds=expires_in),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


class CredentialService:
    """Service for user registration and login"""

    def __init__(self, db: Session):
        self.db = db

    def get_user_by_email(self, email: str) -> Optional[User]:
        statement = select(User).where(User.email == email)
        return self.db.exec(statement).first()

    def register(self, email: str, password: str) -> User:
        """
        Create a user with a salted password hash.

        Raises:
            DuplicateIdentity: If the email is already registered
        """
        if self.get_user_by_email(email):
            raise DuplicateIdentity()

        user = User(email=email, password_hash=hash_password(password))
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            # Lost a race against a concurrent registration of the same email
            self.db.rollback()
            raise DuplicateIdentity()
        self.db.refresh(user)
        logger.info(f"Registered user {user.id} ({user.email})")
        return user

    def authenticate(self, email: str, password: str) -> User:
        """
        Raises:
            InvalidCredentials: If the email is unknown or the password does not match
        """
        user = self.get_user_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            raise InvalidCredentials()
        return user

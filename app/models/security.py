from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from passlib.context import CryptContext
from pydantic import BaseModel

from app import config


class InvalidToken(Exception):
    """Token signature, payload or expiry did not check out."""


class SessionClaim(BaseModel):
    user_id: int
    email: str
    username: str
    expires_at: datetime


class PasswordHasher:
    """Salted bcrypt hashing with a fixed cost factor."""

    def __init__(self, rounds: int = 10):
        self._context = CryptContext(
            schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds
        )

    def hash(self, plaintext: str) -> str:
        return self._context.hash(plaintext)

    def verify(self, plaintext: str, digest: str) -> bool:
        try:
            return self._context.verify(plaintext, digest)
        except (ValueError, TypeError):
            # неизвестный или битый хэш
            return False


class SessionCodec:
    """Issues and validates signed, time-limited session tokens.

    Tokens are HS256 JWTs carrying the user id, email, username and an
    absolute ``exp``. Validation only checks the signature and expiry, there
    is no server-side session table, so a token stays usable until it expires.
    """

    def __init__(self, secret: str, algorithm: str = "HS256", ttl: timedelta = timedelta(days=7)):
        self.secret = secret
        self.algorithm = algorithm
        self.ttl = ttl

    def issue(self, user_id: int, email: str, username: str,
              ttl: Optional[timedelta] = None, now: Optional[datetime] = None) -> str:
        issued = now or datetime.now(timezone.utc)
        expire = issued + (ttl if ttl is not None else self.ttl)
        payload = {
            "user_id": user_id,
            "email": email,
            "username": username,
            "exp": expire,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def validate(self, token: str, now: Optional[datetime] = None) -> SessionClaim:
        if not token:
            raise InvalidToken("Token missing")
        try:
            # срок проверяем сами ниже, чтобы граница exp включалась
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["exp"], "verify_exp": False},
            )
        except jwt.PyJWTError as e:
            raise InvalidToken(f"Could not validate token: {e}")

        try:
            claim = SessionClaim(
                user_id=payload["user_id"],
                email=payload["email"],
                username=payload["username"],
                expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            )
        except (KeyError, ValueError, TypeError, OverflowError, OSError):
            raise InvalidToken("Malformed token payload")

        if (now or datetime.now(timezone.utc)) >= claim.expires_at:
            raise InvalidToken("Token has expired")
        return claim


password_hasher = PasswordHasher(rounds=config.BCRYPT_ROUNDS)
session_codec = SessionCodec(
    config.JWT_SECRET,
    algorithm=config.JWT_ALGORITHM,
    ttl=timedelta(days=config.SESSION_TTL_DAYS),
)


def get_password_hash(password: str) -> str:
    return password_hasher.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return password_hasher.verify(plain_password, hashed_password)


def create_access_token(user) -> str:
    return session_codec.issue(user.id, user.email, user.username)


def verify_access_token(token: str) -> SessionClaim:
    return session_codec.validate(token)

"""Credential Primitives - bcrypt password hashing and HS256 bearer tokens.

Invariants:
    - bcrypt cost factor is fixed at BCRYPT_ROUNDS (not read from settings)
    - PasswordHasher.verify never raises on a malformed stored hash
    - Secrets over 72 UTF-8 bytes are never hashed and never verify
    - Tokens carry user_id, iat and exp; exp - iat == ttl exactly
    - decode() rejects bad signatures and expired tokens with AuthenticationError
"""

from datetime import datetime, timedelta, timezone

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from user_service.config import Settings
from user_service.core.domain_types import TokenClaims, UserId
from user_service.core.errors import AuthenticationError

BCRYPT_ROUNDS = 10
# bcrypt ignores everything past this many bytes of the secret
BCRYPT_MAX_SECRET_BYTES = 72


def _too_long(password: str) -> bool:
    return len(password.encode("utf-8")) > BCRYPT_MAX_SECRET_BYTES


class PasswordHasher:
    """Salted one-way hashing backed by passlib's bcrypt handler."""

    def __init__(self):
        self._context = CryptContext(
            schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=BCRYPT_ROUNDS,
        )

    def hash(self, password: str) -> str:
        if _too_long(password):
            raise ValueError(
                f"Password exceeds {BCRYPT_MAX_SECRET_BYTES} bytes",
            )
        return self._context.hash(password)

    def verify(self, password: str, hashed: str) -> bool:
        """Constant-time check of password against a stored hash."""
        if _too_long(password):
            self._context.dummy_verify()
            return False
        try:
            return self._context.verify(password, hashed)
        except (ValueError, TypeError):
            return False

    def dummy_verify(self) -> None:
        """Burn the same time as a real verify (unknown-account path)."""
        self._context.dummy_verify()


class TokenIssuer:
    """Signs and verifies bearer tokens with a symmetric secret."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        ttl: timedelta = timedelta(hours=24),
    ):
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        self._secret = secret
        self._algorithm = algorithm
        self._ttl = ttl

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenIssuer":
        return cls(
            settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            ttl=timedelta(hours=settings.token_ttl_hours),
        )

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def issue(self, user_id: int) -> str:
        now = datetime.now(timezone.utc).replace(microsecond=0)
        payload = {
            "user_id": int(user_id),
            "iat": int(now.timestamp()),
            "exp": int((now + self._ttl).timestamp()),
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def decode(self, token: str) -> TokenClaims:
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except ExpiredSignatureError as e:
            raise AuthenticationError("Token has expired") from e
        except JWTError as e:
            raise AuthenticationError("Invalid token") from e

        user_id = payload.get("user_id")
        if not isinstance(user_id, int) or "exp" not in payload:
            raise AuthenticationError("Invalid token")

        issued_at = payload.get("iat", payload["exp"] - int(self._ttl.total_seconds()))
        return TokenClaims(
            user_id=UserId(user_id),
            issued_at=datetime.fromtimestamp(issued_at, tz=timezone.utc),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )

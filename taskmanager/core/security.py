"""Password hashing and JWT issuance/verification for authentication."""

import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

import bcrypt
import jwt

if TYPE_CHECKING:
    from taskmanager.core.config import Settings

# Bcrypt cost (rounds); 12 is a good default for security vs speed.
BCRYPT_ROUNDS = 12

# Length bounds for account fields (input validation).
NAME_MIN_LEN = 2
NAME_MAX_LEN = 50
PASSWORD_MIN_LEN = 6
PASSWORD_MAX_LEN = 128

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"

_REQUIRED_CLAIMS = ["sub", "exp", "iat", "iss", "type"]


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    # bcrypt has a 72-byte limit; truncate to avoid errors (validation already limits length).
    pw_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash."""
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


class InvalidTokenError(Exception):
    """Token is malformed, tampered, expired, or of the wrong type. Causes are not distinguished."""

    def __init__(self, message: str = "Invalid or expired token") -> None:
        self.message = message
        super().__init__(message)


@dataclass(frozen=True)
class TokenConfig:
    """Signing material and validity windows; built once at startup."""

    access_secret: str
    refresh_secret: str
    access_ttl: timedelta = timedelta(hours=1)
    refresh_ttl: timedelta = timedelta(days=7)
    algorithm: str = "HS256"
    issuer: str = "task-manager-api"

    def __post_init__(self) -> None:
        if not self.access_secret or not self.refresh_secret:
            raise ValueError("Both access and refresh signing secrets are required")
        if self.access_secret == self.refresh_secret:
            raise ValueError("Access and refresh signing secrets must differ")

    @classmethod
    def from_settings(cls, settings: "Settings") -> "TokenConfig":
        return cls(
            access_secret=settings.JWT_SECRET.get_secret_value(),
            refresh_secret=settings.JWT_REFRESH_SECRET.get_secret_value(),
            access_ttl=timedelta(minutes=settings.JWT_EXPIRE_MINUTES),
            refresh_ttl=timedelta(minutes=settings.JWT_REFRESH_EXPIRE_MINUTES),
            algorithm=settings.JWT_ALGORITHM,
            issuer=settings.JWT_ISSUER,
        )


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


def _utcnow() -> datetime:
    return datetime.now(UTC)


class TokenService:
    """
    Issues and verifies access and refresh JWTs.

    The two token classes are signed with different secrets and carry a "type"
    claim, so a token of one class never verifies as the other. Verification is
    pure: no I/O, no revocation lookup. The injected clock drives both the
    issued lifetime and the expiry check.
    """

    def __init__(
        self,
        config: TokenConfig,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._config = config
        self._clock = clock or _utcnow

    def issue_access(self, user_id: int) -> str:
        """Short-lived token authorizing individual operations."""
        return self._issue(
            user_id,
            ACCESS_TOKEN_TYPE,
            self._config.access_secret,
            self._config.access_ttl,
        )

    def issue_refresh(self, user_id: int) -> str:
        """Long-lived token used only to mint a new pair."""
        return self._issue(
            user_id,
            REFRESH_TOKEN_TYPE,
            self._config.refresh_secret,
            self._config.refresh_ttl,
        )

    def issue_pair(self, user_id: int) -> TokenPair:
        return TokenPair(
            access_token=self.issue_access(user_id),
            refresh_token=self.issue_refresh(user_id),
        )

    def verify_access(self, token: str) -> int:
        """Return the subject user id. Raises InvalidTokenError on any failure."""
        return self._verify(token, ACCESS_TOKEN_TYPE, self._config.access_secret)

    def verify_refresh(self, token: str) -> int:
        """Return the subject user id. Raises InvalidTokenError on any failure."""
        return self._verify(token, REFRESH_TOKEN_TYPE, self._config.refresh_secret)

    def _issue(self, user_id: int, token_type: str, secret: str, ttl: timedelta) -> str:
        now = self._clock()
        payload: dict[str, Any] = {
            "sub": str(user_id),
            "iat": now,
            "exp": now + ttl,
            "iss": self._config.issuer,
            "type": token_type,
            # Unique per token so two tokens issued within the same second still differ.
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(payload, secret, algorithm=self._config.algorithm)

    def _verify(self, token: str, token_type: str, secret: str) -> int:
        if not token or not isinstance(token, str):
            raise InvalidTokenError()
        try:
            # exp and iat are checked below against self._clock, not the wall clock.
            payload = jwt.decode(
                token,
                secret,
                algorithms=[self._config.algorithm],
                issuer=self._config.issuer,
                options={
                    "require": _REQUIRED_CLAIMS,
                    "verify_exp": False,
                    "verify_iat": False,
                },
            )
        except jwt.PyJWTError as e:
            raise InvalidTokenError() from e
        if payload.get("type") != token_type:
            raise InvalidTokenError()
        self._check_lifetime(payload)
        try:
            user_id = int(payload["sub"])
        except (TypeError, ValueError) as e:
            raise InvalidTokenError() from e
        if user_id < 1:
            raise InvalidTokenError()
        return user_id

    def _check_lifetime(self, payload: dict[str, Any]) -> None:
        """Reject tokens expired (or not yet issued) at the service clock's current time."""
        exp, iat = payload["exp"], payload["iat"]
        if not isinstance(exp, (int, float)) or not isinstance(iat, (int, float)):
            raise InvalidTokenError()
        now = self._clock().timestamp()
        if exp <= now or iat > now:
            raise InvalidTokenError()

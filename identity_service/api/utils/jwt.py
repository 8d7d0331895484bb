import hashlib
import re
import secrets
from datetime import UTC, datetime, timedelta
from typing import Optional
from uuid import UUID, uuid4

from jose import ExpiredSignatureError, JWTError, jwt
from pydantic import BaseModel, ValidationError

from identity_service.domain.entities import ErrorCode
from identity_service.libs.result import Error, Result, Return

DURATION_PATTERN = re.compile(r"^(\d+)([smhd])$")
UNIT_SECONDS = {"s": 1, "m": 60, "h": 3600, "d": 86400}


def parse_duration(value: str) -> Result[int]:
    """
    Parse a duration string like "30s", "1m", "12h" or "7d" into seconds.

    Args:
        value: Duration string (integer followed by s, m, h or d)

    Returns:
        Result with the number of seconds, or INVALID_DURATION_FORMAT
    """
    match = DURATION_PATTERN.match(value) if isinstance(value, str) else None
    if match is None:
        return Return.err(
            Error(ErrorCode.INVALID_DURATION_FORMAT, f"Invalid duration format: {value!r}")
        )
    amount, unit = match.groups()
    return Return.ok(int(amount) * UNIT_SECONDS[unit])


class AccessClaims(BaseModel):
    """Identity claims carried by an access token"""

    user_id: int
    user_type: str
    admin_role: Optional[str] = None
    jti: Optional[str] = None


class TokenCodec:
    """
    Signs and verifies access tokens, generates refresh tokens.

    Access tokens are HS256 JWTs with a configurable lifetime. Refresh tokens
    are opaque random strings with no relation to the claims.
    """

    ALGORITHM = "HS256"

    def __init__(self, secret: str, access_token_seconds: int, refresh_token_seconds: int):
        if access_token_seconds > refresh_token_seconds:
            raise ValueError("Access token lifetime must not exceed refresh token lifetime")
        self.secret = secret
        self.access_token_seconds = access_token_seconds
        self.refresh_token_seconds = refresh_token_seconds

    @classmethod
    def from_config(cls, config) -> "TokenCodec":
        access = parse_duration(config.ACCESS_TOKEN_EXPIRY)
        if access.is_err():
            raise ValueError(f"ACCESS_TOKEN_EXPIRY: {access.error.message}")
        refresh = parse_duration(config.REFRESH_TOKEN_EXPIRY)
        if refresh.is_err():
            raise ValueError(f"REFRESH_TOKEN_EXPIRY: {refresh.error.message}")
        return cls(config.JWT_SECRET, access.value, refresh.value)

    def issue_access_token(
        self,
        user_id: int,
        user_type: str,
        admin_role: Optional[str],
        issued_at: Optional[datetime] = None,
        token_id: Optional[UUID] = None,
    ) -> str:
        """
        Create a signed access token.

        Args:
            user_id: Subject user id
            user_type: User type snapshot
            admin_role: Admin role snapshot (may be None)
            issued_at: Issue time, defaults to now
            token_id: Value of the jti claim, defaults to a new UUID

        Returns:
            JWT token string
        """
        now = issued_at or datetime.now(UTC)
        payload = {
            "user_id": user_id,
            "user_type": user_type,
            "admin_role": admin_role,
            "jti": str(token_id or uuid4()),
            "iat": now,
            "exp": now + timedelta(seconds=self.access_token_seconds),
        }
        return jwt.encode(payload, self.secret, algorithm=self.ALGORITHM)

    @staticmethod
    def issue_refresh_token() -> str:
        return secrets.token_hex(64)

    @staticmethod
    def read_token_id(token: str) -> Optional[UUID]:
        """jti claim of a token, read without verifying it"""
        try:
            return UUID(jwt.get_unverified_claims(token)["jti"])
        except (JWTError, KeyError, TypeError, ValueError, AttributeError):
            return None

    def verify_access_token(self, token: str) -> Result[AccessClaims]:
        """
        Verify signature and expiry of an access token.

        Signature is checked before expiry, so a token signed with another
        secret is always TOKEN_INVALID even when it is also expired.

        Returns:
            Result with AccessClaims, or TOKEN_EXPIRED / TOKEN_INVALID
        """
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.ALGORITHM])
        except ExpiredSignatureError:
            return Return.err(Error(ErrorCode.TOKEN_EXPIRED, "Access token has expired"))
        except JWTError:
            return Return.err(Error(ErrorCode.TOKEN_INVALID, "Invalid access token"))

        try:
            claims = AccessClaims.model_validate(payload)
        except ValidationError:
            return Return.err(Error(ErrorCode.TOKEN_INVALID, "Invalid access token"))
        return Return.ok(claims)


def hash_refresh_token(refresh_token: str) -> str:
    """SHA-256 hex digest stored in place of the refresh token value"""
    return hashlib.sha256(refresh_token.encode()).hexdigest()

"""
JWT token utilities for authentication.

Tokens are issued by the account service; this service only verifies them.
``create_access_token`` mirrors the issuer's claim layout for tooling and tests.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID
from jose import JWTError, jwt
from proofline.config import settings
from proofline.schemas.auth import TokenData


def create_access_token(user_id: UUID, email: Optional[str] = None) -> str:
    """
    Create a JWT access token.

    Args:
        user_id: User's UUID
        email: User's email address

    Returns:
        Encoded JWT token string
    """
    expire = datetime.now(timezone.utc) + timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS)

    to_encode = {
        "sub": str(user_id),
        "exp": expire,
        "type": "access"
    }
    if email:
        to_encode["email"] = email

    return jwt.encode(
        to_encode,
        settings.JWT_SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM
    )


def verify_token(token: str, expected_type: str = "access") -> TokenData:
    """
    Verify and decode a JWT token.

    Args:
        token: JWT token string to verify
        expected_type: Expected token type

    Returns:
        TokenData object with decoded token information

    Raises:
        JWTError: If token is invalid, expired, or type doesn't match
    """
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM]
        )

        user_id_str: str | None = payload.get("sub")
        token_type: str = payload.get("type", "access")

        if user_id_str is None:
            raise JWTError("Invalid token payload")

        if token_type != expected_type:
            raise JWTError(f"Invalid token type: expected {expected_type}, got {token_type}")

        return TokenData(
            user_id=UUID(user_id_str),
            email=payload.get("email"),
            token_type=token_type
        )

    except (JWTError, ValueError) as e:
        raise JWTError(f"Token verification failed: {str(e)}")

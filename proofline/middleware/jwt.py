"""
JWT authentication dependency.
"""
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError

from proofline.schemas.auth import CurrentUser
from proofline.utils.jwt import verify_token
from proofline.utils.logger import get_logger

logger = get_logger("jwt_middleware")

# HTTP Bearer token scheme
security = HTTPBearer()


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> CurrentUser:
    """
    Dependency to get the current caller from the bearer token.

    Args:
        credentials: HTTP Bearer token credentials

    Returns:
        CurrentUser built from the token claims

    Raises:
        HTTPException: If token is invalid
    """
    try:
        token_data = verify_token(credentials.credentials, expected_type="access")
    except JWTError as e:
        logger.warning("JWT verification failed", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"}
        )

    logger.debug("Caller authenticated", user_id=str(token_data.user_id))
    return CurrentUser(id=token_data.user_id, email=token_data.email)

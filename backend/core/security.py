from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from fastapi import Cookie, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import jwt, JWTError
from pydantic import BaseModel

from core.config import settings
from utils.logger import get_logger

logger = get_logger("backend.core.security")

# Reads "Authorization: Bearer <token>" without failing when it is absent;
# browsers send the token in the auth cookie instead.
bearer_scheme = HTTPBearer(auto_error=False)


class SubjectProperties(BaseModel):
    id: str
    email: Optional[str] = None


class Subject(BaseModel):
    """Authenticated identity attached to a request."""
    type: str = "user"
    properties: SubjectProperties


# ------ Password Hashing -----
def hash_password(password: str, rounds: Optional[int] = None) -> str:
    """Hash password using bcrypt. bcrypt only looks at the first 72 bytes."""
    password_bytes = str(password).encode("utf-8")[:72]

    if not password_bytes:
        raise ValueError("Password cannot be empty")

    salt = bcrypt.gensalt(rounds=rounds or settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password_bytes, salt).decode("utf-8")

def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Verify password against bcrypt hash. Accounts without a password never match."""
    if not hashed_password:
        return False

    password_bytes = str(plain_password).encode("utf-8")[:72]
    if not password_bytes:
        return False

    try:
        return bcrypt.checkpw(password_bytes, hashed_password.encode("utf-8"))
    except ValueError:
        # Malformed hash stored for the user
        return False

# ------ JWT Token creation -----
def create_access_token(subject_id: str, email: Optional[str] = None) -> str:
    """Create a signed JWT carrying the subject id in 'sub'."""
    expire = datetime.now(timezone.utc) + timedelta(
        minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES
    )
    to_encode = {"sub": subject_id, "email": email, "type": "user", "exp": expire}
    token = jwt.encode(
        to_encode,
        settings.JWT_SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM
    )
    logger.debug("Access token created", extra={"user_sub": subject_id})
    return token

def decode_access_token(token: str) -> Optional[Subject]:
    """Decode a token into a Subject, or None if it is invalid or expired."""
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except jwt.ExpiredSignatureError:
        logger.warning("Token expired")
        return None
    except JWTError as e:
        logger.warning("Token decode failed", extra={"error": str(e)})
        return None

    subject_id = payload.get("sub")
    if not subject_id:
        logger.warning("Token has no subject")
        return None

    return Subject(
        type=payload.get("type") or "user",
        properties=SubjectProperties(id=str(subject_id), email=payload.get("email")),
    )

# ------ Request subject -----
def get_optional_subject(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    access_token: Optional[str] = Cookie(None, alias=settings.AUTH_COOKIE_NAME),
) -> Optional[Subject]:
    """
    Subject of the request, or None when the request is anonymous.

    Handlers that must validate their parameters before authenticating use
    this and answer 401 themselves.
    """
    token = credentials.credentials if credentials else access_token
    if not token:
        return None
    return decode_access_token(token)

def get_current_subject(subject: Optional[Subject] = Depends(get_optional_subject)) -> Subject:
    """Dependency used in protected routes. Raises 401 when unauthenticated."""
    if subject is None:
        logger.warning("Authentication failed - missing or invalid token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return subject

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from core.database import get_db
from core.security import Subject, create_access_token, get_current_subject, verify_password
from schemas.user_schema import TokenResponse, UserCreate, UserLogin
from utils.logger import get_logger
from utils.queries import create_user, get_user

logger = get_logger("backend.api.auth")

router = APIRouter(prefix="/auth", tags=["auth"])


def _set_auth_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        httponly=True,
        samesite="lax",
        max_age=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )

# ------ Register User -----
@router.post("/register", response_model=TokenResponse)
async def register_user(user: UserCreate, response: Response, db: AsyncSession = Depends(get_db)):
    logger.info("User registration attempt", extra={"email": user.email})

    existing = await get_user(db, user.email)
    if existing:
        logger.warning("Registration failed - email exists", extra={"email": user.email})
        raise HTTPException(status_code=400, detail="Email already registered")

    new_user = await create_user(db, user.email, user.password)

    access_token = create_access_token(new_user.id, new_user.email)
    _set_auth_cookie(response, access_token)

    logger.info("User registered successfully", extra={"user_id": new_user.id})
    return TokenResponse(token=access_token)

# ------ Login User -----
@router.post("/login", response_model=TokenResponse)
async def login_user(user_credentials: UserLogin, response: Response, db: AsyncSession = Depends(get_db)):
    logger.info("Login attempt", extra={"email": user_credentials.email})

    users = await get_user(db, user_credentials.email)
    db_user = users[0] if users else None

    if not db_user or not verify_password(user_credentials.password, db_user.password):
        logger.warning("Login failed - invalid credentials", extra={"email": user_credentials.email})
        raise HTTPException(status_code=401, detail="Invalid credentials")

    access_token = create_access_token(db_user.id, db_user.email)
    _set_auth_cookie(response, access_token)

    logger.info("Login successful", extra={"user_id": db_user.id})
    return TokenResponse(token=access_token)

# ------ Logout -----
@router.post("/logout")
async def logout_user(response: Response):
    response.delete_cookie(settings.AUTH_COOKIE_NAME)
    return {"detail": "Logged out"}

# ------ Current subject -----
@router.get("/me", response_model=Subject)
async def get_me(subject: Subject = Depends(get_current_subject)):
    return subject

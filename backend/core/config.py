from typing import List, Optional

from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    app_name: str = "AI Chatbot Backend"

    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7 # 1 week
    AUTH_COOKIE_NAME: str = "access_token"
    BCRYPT_ROUNDS: int = 10

    # Database
    DATABASE_URL: str

    # Language model
    OPENAI_API_KEY: str
    DEFAULT_MODEL_NAME: str = "gpt-4o-mini"
    IMAGE_MODEL_NAME: str = "dall-e-3"

    # Object storage
    BUCKET_NAME: str
    AWS_REGION: str = "us-east-1"
    AWS_ACCESS_KEY_ID: Optional[str] = None
    AWS_SECRET_ACCESS_KEY: Optional[str] = None
    PRESIGNED_URL_EXPIRES: int = 86400 # 1 day

    CORS_ORIGINS: List[str] = ["*"]

    class Config:
        env_file = ".env"
        extra = "ignore"

settings = Settings()

import os
import tempfile
from pydantic_settings import BaseSettings
from typing import Optional
from dotenv import load_dotenv

load_dotenv()

class Settings(BaseSettings):
    """Configuration settings for the application."""
    PROJECT_NAME: str = "Restaurant Onboarding API"
    MONGO_URI: str = os.getenv("MONGO_URI", "mongodb://localhost:27017")
    DB_NAME: str = os.getenv("DB_NAME", "food_delivery")

    # access tokens are issued by the auth service, we only decode them
    SECRET_KEY: str = os.getenv("SECRET_KEY", "MySecretKey@123")
    ALGORITHM: str = "HS256"

    # object storage for KYC documents and images
    S3_BUCKET: Optional[str] = os.getenv("S3_BUCKET")
    S3_KEY_PREFIX: str = os.getenv("S3_KEY_PREFIX", "restaurants/")
    S3_PUBLIC_BASE_URL: Optional[str] = os.getenv("S3_PUBLIC_BASE_URL")
    AWS_REGION: str = os.getenv("AWS_REGION", "ap-south-1")
    AWS_ACCESS_KEY_ID: Optional[str] = os.getenv("AWS_ACCESS_KEY_ID")
    AWS_SECRET_ACCESS_KEY: Optional[str] = os.getenv("AWS_SECRET_ACCESS_KEY")
    UPLOAD_TMP_DIR: str = os.getenv("UPLOAD_TMP_DIR", tempfile.gettempdir())

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    # legacy | message | status
    RESPONSE_STYLE: str = os.getenv("RESPONSE_STYLE", "legacy")
    DEFAULT_MIN_ORDER_AMOUNT: float = 100

    class Config:
        env_file = ".env"
        extra = "ignore"

settings = Settings()

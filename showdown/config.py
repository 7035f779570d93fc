from __future__ import annotations
import os
from datetime import date
from pydantic import BaseModel

class Settings(BaseModel):
    environment: str = os.getenv("ENVIRONMENT", "dev")
    app_name: str = os.getenv("APP_NAME", "carmod-showdown-api")
    app_display_name: str = os.getenv("APP_DISPLAY_NAME", "CarMod Showdown")
    app_version: str = os.getenv("APP_VERSION", "0.1.0")
    git_sha: str = os.getenv("GIT_SHA", "dev")
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    cors_origins: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
    database_url: str = os.getenv("DATABASE_URL", "postgresql+asyncpg://postgres:postgres@db:5432/showdown_dev")
    db_statement_timeout_ms: int = int(os.getenv("DB_STATEMENT_TIMEOUT_MS", "5000"))

    # Competition rules
    competition_start_date: date = date.fromisoformat(os.getenv("COMPETITION_START_DATE", "2025-10-07"))
    competition_weeks: int = int(os.getenv("COMPETITION_WEEKS", "10"))
    votes_required: int = int(os.getenv("VOTES_REQUIRED", "25"))  # quota, also the batch size
    winner_quorum_pct: int = int(os.getenv("WINNER_QUORUM_PCT", "20"))
    winners_limit: int = int(os.getenv("WINNERS_LIMIT", "10"))

    # Uploads
    max_upload_bytes: int = int(os.getenv("MAX_UPLOAD_BYTES", str(50 * 1024 * 1024)))
    allowed_extensions: list[str] = [".glb", ".gltf"]

    # Object storage
    s3_endpoint: str = os.getenv("S3_ENDPOINT", "http://minio:9000")
    s3_access_key: str = os.getenv("S3_ACCESS_KEY", "minioadmin")
    s3_secret_key: str = os.getenv("S3_SECRET_KEY", "minioadmin")
    s3_bucket_uploads: str = os.getenv("S3_BUCKET_UPLOADS", "carmod-parts")
    s3_public_base_url: str = os.getenv("S3_PUBLIC_BASE_URL", "http://localhost:9000/carmod-parts")

    # Auth
    jwt_secret: str = os.getenv("JWT_SECRET", "dev-secret-change-me")
    jwt_alg: str = "HS256"
    access_ttl_min: int = int(os.getenv("ACCESS_TTL_MIN", "60"))
    refresh_ttl_min: int = int(os.getenv("REFRESH_TTL_MIN", "10080"))  # 7d

    # Email (Resend HTTP API)
    resend_api_key: str = os.getenv("RESEND_API_KEY", "")
    email_from: str = os.getenv("EMAIL_FROM", "CarMod Showdown <onboarding@resend.dev>")
    frontend_url: str = os.getenv("FRONTEND_URL", "http://localhost:3000")

settings = Settings()

import os
from dotenv import load_dotenv

load_dotenv()

class Config:
    """
    Settings read straight from environment variables (and a local .env file).
    """
    # Database
    DATABASE_URL: str = os.environ.get("DATABASE_URL")
    DB_POOL_MIN_SIZE: int = int(os.environ.get("DB_POOL_MIN_SIZE", 2))
    DB_POOL_MAX_SIZE: int = int(os.environ.get("DB_POOL_MAX_SIZE", 10))

    # Redis: sessions live in the application instance, rate limits may use a separate one
    APPLICATION_REDIS_URL: str = os.environ.get("APPLICATION_REDIS_URL")
    RATE_LIMITER_REDIS_URL: str = os.environ.get("RATE_LIMITER_REDIS_URL")

    # Auth
    SECRET_KEY: str = os.environ.get("SECRET_KEY", "change-me")
    ALGORITHM: str = os.environ.get("ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.environ.get("ACCESS_TOKEN_EXPIRE_MINUTES", 60))
    SESSION_TTL_SECONDS: int = int(os.environ.get("SESSION_TTL_SECONDS", 3600))

    # HTTP
    CORS_ORIGINS: list = [o.strip() for o in os.environ.get("CORS_ORIGINS", "*").split(",") if o.strip()]

    # Background jobs
    TERM_ROLLOVER_INTERVAL_MINUTES: int = int(os.environ.get("TERM_ROLLOVER_INTERVAL_MINUTES", 60))

    LOG_DIR: str = os.environ.get("LOG_DIR", "logs")

# Single importable settings instance
settings = Config()

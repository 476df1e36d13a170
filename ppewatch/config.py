"""
Application configuration settings.
"""

from pydantic_settings import BaseSettings
from typing import Literal


class Settings(BaseSettings):
    """Application settings with environment variable support."""
    
    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./ppewatch.db"
    
    # Runtime
    ENVIRONMENT: Literal["development", "test", "production"] = "development"
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: list = ["http://localhost:5173", "http://localhost:3000"]
    
    # Bearer tokens (HS256 JWT, member email in "sub")
    SECRET_KEY: str = "change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 12
    
    # Compliance data
    # Newest records scanned by /compliance-data
    COMPLIANCE_RECORD_LIMIT: int = 1000
    
    # Alerts
    ALERTS_DEFAULT_LIMIT: int = 25
    ALERTS_DEFAULT_WINDOW_DAYS: int = 7
    
    # Repeat offenders
    # A worker needs at least this many violated items to be listed
    REPEAT_OFFENDER_MIN_VIOLATIONS: int = 10
    REPEAT_OFFENDER_LIMIT: int = 5
    
    # Risk level bucketing for repeat offenders (violations >= value)
    RISK_LEVEL_HIGH: int = 20
    RISK_LEVEL_MEDIUM: int = 15
    
    # High-risk zones
    # Non-compliant checks (total, or for any single item) needed to flag a zone
    HIGH_RISK_ZONE_MIN_VIOLATIONS: int = 1400
    
    # Trends
    # Buckets reach back this many weeks/months before the current one
    TREND_BUCKETS: int = 5
    # Fill empty buckets with synthetic decreasing numbers (demo installs only)
    TREND_DEMO_MODE: bool = False
    
    # Identical GETs within this window are served from memory; 0 disables
    RESPONSE_CACHE_TTL_SECONDS: float = 5.0
    
    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()

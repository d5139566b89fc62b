from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    PROJECT_NAME: str = "Boulder League"
    API_V1_STR: str = "/api/v1"
    SUPABASE_URL: Optional[str] = None
    SUPABASE_KEY: Optional[str] = None
    # Postgres schema holding the league tables ("boulder-league" in production)
    SUPABASE_SCHEMA: str = "boulder-league-dev"
    # When unset, bearer tokens are decoded without signature verification
    SUPABASE_JWT_SECRET: Optional[str] = None
    CORS_ORIGINS: list[str] = ["http://localhost:3000", "http://localhost:5173"]
    LOG_LEVEL: str = "INFO"

    class Config:
        case_sensitive = True
        env_file = ".env"


settings = Settings()

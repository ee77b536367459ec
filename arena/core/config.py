from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./arena.db"
    SECRET_KEY: str = "YOUR_SECRET_KEY_HERE"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # Team id generation retries before giving up with IdGenerationExhausted
    TEAM_ID_MAX_ATTEMPTS: int = 10

    LOG_LEVEL: str = "INFO"
    JSON_LOGS: bool = False
    APP_ENV: str = "development"

    class Config:
        env_file = ".env"

settings = Settings()

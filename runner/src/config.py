from pydantic_settings import BaseSettings
from functools import lru_cache

class Settings(BaseSettings):
    database_url: str = "sqlite:///./stagerunner.db"
    record_runs: bool = False  # Persist runs for the history API

    log_level: str = "INFO"

    # Checkout settings
    checkout_timeout: int = 120  # Seconds allowed per git operation
    checkout_depth: int = 1

    class Config:
        env_file = ".env"

@lru_cache()
def get_settings() -> Settings:
    return Settings()

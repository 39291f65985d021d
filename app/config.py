from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    database_url: str = "sqlite:///./valve_jobs.db"

    # All jobs live in one serialized blob under this key
    storage_key: str = "@valve_jobs"

    # Import fallbacks
    default_description: str = "No description"
    synthetic_valve_prefix: str = "VLV"

    class Config:
        env_file = ".env"
        case_sensitive = False


@lru_cache()
def get_settings():
    return Settings()

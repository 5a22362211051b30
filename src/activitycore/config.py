from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "sqlite:///./activities.db"
    user_id: int = 1  # single-athlete default; the API passes explicit ids
    default_max_hr: int = 190
    default_rest_hr: int = 60
    best_effort_distances: List[int] = [1000, 5000, 10000]
    gps_batch_size: int = 1000
    training_load_days: int = 90
    third_party_provider: str = "strava"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings

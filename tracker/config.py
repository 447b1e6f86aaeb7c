from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Paths
    base_dir: Path = Path(__file__).resolve().parent.parent
    data_dir: Path = base_dir / "data"
    db_path: Path = data_dir / "tracker.duckdb"
    seed_path: Path = Path(__file__).resolve().parent / "seed.yaml"

    # Server
    host: str = "127.0.0.1"
    port: int = 8766
    log_level: str = "INFO"

    # Editing
    debounce_seconds: float = 0.5  # quiet period before a text edit is written
    default_checklist: list[str] = ["Rec Letters", "Common App", "Their portal"]
    max_compared_schools: int = 4

    # Views
    default_sort_mode: Literal[
        "deadline-asc",
        "schoolName-asc",
        "schoolName-desc",
        "doneness-asc",
        "doneness-desc",
    ] = "deadline-asc"
    default_essay_sort_mode: Literal[
        "deadline-asc",
        "schoolName-asc",
        "schoolName-desc",
        "wordCount-asc",
        "wordCount-desc",
    ] = "deadline-asc"

    model_config = {"env_prefix": "TRACKER_"}


settings = Settings()

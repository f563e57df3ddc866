"""
Runtime settings for learnpath.

Read from environment variables, with the project's .env file loaded first:
- LEARNPATH_DB: progress database (default: ~/.learnpath/progress.db)
- LEARNPATH_TOPICS_DIR: directory of topic YAML files
- LEARNPATH_LOG_LEVEL: logging level name (default: INFO)
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from learnpath.classroom.storage import DEFAULT_STORAGE_DB
from learnpath.utils.topic_loader import TOPICS_DIR


PROJECT_ROOT = Path(__file__).parent.parent


@dataclass(frozen=True)
class Settings:
    db_path: Path
    topics_dir: Path
    log_level: str = "INFO"


def load_settings() -> Settings:
    """Build settings from the environment (.env included)."""
    load_dotenv(PROJECT_ROOT / ".env")
    return Settings(
        db_path=Path(os.getenv("LEARNPATH_DB", str(DEFAULT_STORAGE_DB))).expanduser(),
        topics_dir=Path(os.getenv("LEARNPATH_TOPICS_DIR", str(TOPICS_DIR))).expanduser(),
        log_level=os.getenv("LEARNPATH_LOG_LEVEL", "INFO").upper(),
    )

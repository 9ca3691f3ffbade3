"""Configuration settings for the vocabulary trainer."""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Define base directory
BASE_DIR = Path(__file__).parent.parent.parent
PACKAGE_DIR = Path(__file__).parent

# Load environment variables from .env file
env_file = ".env.test" if os.getenv("ENV") == "test" else ".env"
load_dotenv(env_file)


# Define data directories from environment variables
DATA_DIR = Path(os.getenv("DATA_DIR", "./data"))
MEDIA_DIR = DATA_DIR / "media"
PRONUNCIATIONS_DIR = MEDIA_DIR / "pronunciations"
DEFAULT_WORD_BANK_PATH = PACKAGE_DIR / "data" / "hsk_words.json"

# Learning settings
SRS_INTERVALS = [0, 1, 3, 7, 14, 30]  # days until next review, indexed by SRS level
STORAGE_KEY = "hsk-vocab-storage"
HSK_LEVELS = [1, 2, 3, 4, 5, 6]


def ensure_directories() -> None:
    """Ensure all required directories exist."""
    directories = [
        DATA_DIR,
        MEDIA_DIR,
        PRONUNCIATIONS_DIR,
    ]

    for directory in directories:
        directory.mkdir(parents=True, exist_ok=True)


def _get_int_list(name: str, default: list[int]) -> list[int]:
    """Parse a comma separated list of integers from an environment variable."""
    raw = os.getenv(name, "")
    if not raw.strip():
        return list(default)
    return [int(item) for item in raw.split(",") if item.strip()]


@dataclass
class PathSettings:
    """Path configuration settings."""
    base_dir: Path = BASE_DIR
    data_dir: Path = DATA_DIR
    media_dir: Path = MEDIA_DIR
    pronunciations_dir: Path = PRONUNCIATIONS_DIR


@dataclass
class DatabaseSettings:
    """Database configuration settings."""
    url: str = os.getenv("DATABASE_URL", f"sqlite:///{DATA_DIR / 'hskvocab.db'}")
    echo: bool = os.getenv("DATABASE_ECHO", "false").lower() == "true"


@dataclass
class LoggingSettings:
    """Logging configuration settings."""
    level: str = os.getenv("LOG_LEVEL", "INFO")
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    dir: Optional[str] = os.getenv("LOG_DIR", None)
    rotation: str = os.getenv("LOG_ROTATION", "midnight")
    interval: int = int(os.getenv("LOG_INTERVAL", "1"))
    backup_count: int = int(os.getenv("LOG_BACKUP_COUNT", "7"))


@dataclass
class StorageSettings:
    """Persisted state settings."""
    key: str = os.getenv("STORAGE_KEY", STORAGE_KEY)


@dataclass
class LearningSettings:
    """Learning process settings."""
    srs_intervals: list[int] = field(default_factory=lambda: _get_int_list("SRS_INTERVALS", SRS_INTERVALS))
    quiz_count: int = int(os.getenv("QUIZ_COUNT", "10"))
    option_count: int = int(os.getenv("OPTION_COUNT", "4"))
    min_daily_goal: int = 5
    max_daily_goal: int = 100
    default_daily_goal: int = int(os.getenv("DEFAULT_DAILY_GOAL", "20"))
    default_levels: list[int] = field(default_factory=lambda: _get_int_list("DEFAULT_LEVELS", [1, 2]))
    word_bank_path: Path = Path(os.getenv("WORD_BANK_PATH", str(DEFAULT_WORD_BANK_PATH)))


@dataclass
class SpeechSettings:
    """Pronunciation playback settings."""
    language: str = os.getenv("SPEECH_LANGUAGE", "zh-CN")
    slow: bool = os.getenv("SPEECH_SLOW", "true").lower() == "true"


@dataclass
class MonitoringSettings:
    """Prometheus exporter settings."""
    metrics_port: int = int(os.getenv("METRICS_PORT", "0"))


def get_path_settings() -> PathSettings:
    """Get path settings."""
    return PathSettings()


def get_database_settings() -> DatabaseSettings:
    """Get database settings."""
    return DatabaseSettings()


def get_logging_settings() -> LoggingSettings:
    """Get logging settings."""
    return LoggingSettings()


def get_storage_settings() -> StorageSettings:
    """Get storage settings."""
    return StorageSettings()


def get_learning_settings() -> LearningSettings:
    """Get learning settings."""
    return LearningSettings()


def get_speech_settings() -> SpeechSettings:
    """Get speech settings."""
    return SpeechSettings()


def get_monitoring_settings() -> MonitoringSettings:
    """Get monitoring settings."""
    return MonitoringSettings()


@dataclass
class AppConfig:
    """Main settings class that combines all configuration settings."""
    paths: PathSettings = field(default_factory=get_path_settings)
    database: DatabaseSettings = field(default_factory=get_database_settings)
    logging: LoggingSettings = field(default_factory=get_logging_settings)
    storage: StorageSettings = field(default_factory=get_storage_settings)
    learning: LearningSettings = field(default_factory=get_learning_settings)
    speech: SpeechSettings = field(default_factory=get_speech_settings)
    monitoring: MonitoringSettings = field(default_factory=get_monitoring_settings)

    def validate(self) -> None:
        """Validate settings and raise ValueError if invalid."""
        intervals = self.learning.srs_intervals
        if len(intervals) < 2:
            raise ValueError("SRS_INTERVALS must define at least two levels")

        if intervals[0] != 0:
            raise ValueError("SRS_INTERVALS must start with 0 for new words")

        if any(later < earlier for earlier, later in zip(intervals, intervals[1:])):
            raise ValueError("SRS_INTERVALS must be non-decreasing")

        if self.learning.quiz_count < 1:
            raise ValueError("QUIZ_COUNT must be positive")

        if self.learning.option_count < 2:
            raise ValueError("OPTION_COUNT must be at least 2")

        if self.learning.min_daily_goal > self.learning.max_daily_goal:
            raise ValueError("Daily goal lower bound cannot exceed the upper bound")

        if not self.learning.min_daily_goal <= self.learning.default_daily_goal <= self.learning.max_daily_goal:
            raise ValueError(
                f"DEFAULT_DAILY_GOAL must be between {self.learning.min_daily_goal} and {self.learning.max_daily_goal}"
            )

        if not self.learning.default_levels:
            raise ValueError("DEFAULT_LEVELS must contain at least one level")

        if any(level not in HSK_LEVELS for level in self.learning.default_levels):
            raise ValueError("DEFAULT_LEVELS must only contain HSK levels 1-6")

        if not self.storage.key:
            raise ValueError("STORAGE_KEY must not be empty")


# Create global settings instance
settings = AppConfig()
settings.validate()

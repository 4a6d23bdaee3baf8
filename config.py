# config.py
from dataclasses import dataclass, field
from pathlib import Path
from typing import Tuple

@dataclass
class Config:
    """Holds all application configuration."""
    SEARCH_ENDPOINT: str = "https://itunes.apple.com/search"
    SEARCH_RESULT_LIMIT: int = 25
    REQUEST_TIMEOUT_SECONDS: float = 10.0
    PLAYER_COMMAND: str = "ffplay"
    PLAYER_ARGS: Tuple[str, ...] = ("-nodisp", "-autoexit", "-loglevel", "quiet")
    PLAYBACK_POLL_SECONDS: float = 0.5
    LOG_FILE: Path = field(
        default_factory=lambda: Path.home() / ".local" / "share" / "itunes-preview" / "itunes-preview.log"
    )
    LOG_LEVEL: str = "INFO"

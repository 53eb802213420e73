"""Configuration constants for cravelog."""

import os
from datetime import timedelta
from pathlib import Path

from dotenv import load_dotenv

# Data directory. CRAVELOG_HOME wins over the default.
HOME_ENV = "CRAVELOG_HOME"
DEFAULT_HOME: Path = Path("~/.cravelog").expanduser()
DB_NAME = "cravings.db"

# Chat completion API.
CHAT_COMPLETIONS_URL = "https://api.openai.com/v1/chat/completions"
API_KEY_ENV = "OPENAI_API_KEY"
DEFAULT_MODEL = "gpt-4"
TEMPERATURE = 0.7
# Seconds per chat request.
REQUEST_TIMEOUT = 60.0

# List filters. Thresholds are inclusive.
HIGH_INTENSITY_THRESHOLD = 7.0
HIGH_RESISTANCE_THRESHOLD = 7.0
RECENT_WINDOW = timedelta(days=7)

# Logging form.
RATING_MIN = 1
RATING_MAX = 10
DEFAULT_RATING = 5.0
DESCRIPTION_LIMIT = 300
DESCRIPTION_WARN_AT = 250
DESCRIPTION_ALERT_AT = 280


def resolve_home(explicit: str | Path | None = None) -> Path:
    """Pick the data directory: explicit argument, then $CRAVELOG_HOME, then the default."""
    if explicit:
        return Path(explicit).expanduser().resolve()
    from_env = os.environ.get(HOME_ENV)
    if from_env:
        return Path(from_env).expanduser().resolve()
    return DEFAULT_HOME


def load_env(start: Path | None = None) -> Path | None:
    """Load the nearest .env file walking up from ``start`` (default CWD).

    Returns the path that was loaded, or None when there is no .env file.
    Variables already present in the environment are not overridden.
    """
    cwd = start or Path.cwd()
    for parent in [cwd, *cwd.parents]:
        env_file = parent / ".env"
        if env_file.exists():
            load_dotenv(env_file)
            return env_file
    return None

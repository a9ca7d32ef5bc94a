import os
import json
import logging
from pathlib import Path
from dotenv import load_dotenv

# Load .env first (Project specific overrides)
load_dotenv()

logger = logging.getLogger(__name__)

CONFIG_PATH = Path.home() / ".moviescope_config.json"

DEFAULT_OMDB_BASE_URL = "http://www.omdbapi.com/"
DEFAULT_SEARCH_TERM = "marvel"

VALID_KEYS = [
    "OMDB_API_KEY", "OMDB_BASE_URL", "DEFAULT_SEARCH_TERM",
    "SIMILAR_LIMIT", "CORS_ALLOW_ORIGINS",
]

class Config:
    def __init__(self):
        self._load_from_file()

    def _load_from_file(self):
        self.file_config = {}
        if CONFIG_PATH.exists():
            try:
                self.file_config = json.loads(CONFIG_PATH.read_text())
            except (OSError, ValueError) as e:
                logger.warning(f"Ignoring unreadable config file {CONFIG_PATH}: {e}")

    def _get(self, key: str, default=None):
        return os.getenv(key) or self.file_config.get(key) or default

    @property
    def OMDB_API_KEY(self):
        return self._get("OMDB_API_KEY")

    @property
    def OMDB_BASE_URL(self):
        return self._get("OMDB_BASE_URL", DEFAULT_OMDB_BASE_URL)

    @property
    def DEFAULT_SEARCH_TERM(self):
        return self._get("DEFAULT_SEARCH_TERM", DEFAULT_SEARCH_TERM)

    @property
    def SIMILAR_LIMIT(self):
        try:
            return int(self._get("SIMILAR_LIMIT", 6))
        except (TypeError, ValueError):
            return 6

    @property
    def CORS_ALLOW_ORIGINS(self):
        """
        Comma-separated list of allowed origins. Empty means any origin.
        Example: CORS_ALLOW_ORIGINS=https://movies.example.com,http://localhost:3000
        """
        raw = self._get("CORS_ALLOW_ORIGINS", "")
        return [origin.strip() for origin in str(raw).split(",") if origin.strip()]

    def save(self, key: str, value: str):
        self.file_config[key] = value
        CONFIG_PATH.write_text(json.dumps(self.file_config, indent=2))

    def validate(self):
        if not self.OMDB_API_KEY:
            logger.warning("OMDB_API_KEY is not set; upstream requests will be rejected.")

config = Config()

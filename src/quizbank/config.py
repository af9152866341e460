"""
Application settings.

Settings come from a JSON file (default ``~/.quizbank/settings.json``)
with environment variables taking precedence. A malformed or unreadable
file never stops the tool: it is logged and defaults are used.

The model credential is only carried here for the CLI; the extraction
pipeline receives it as an explicit argument.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from quizbank.extractor.config import DEFAULT_MODEL
from quizbank.store import JsonFileStore, QuestionStore, RealtimeDatabaseStore

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_PATH = Path.home() / ".quizbank" / "settings.json"
DEFAULT_STORE_PATH = Path.home() / ".quizbank" / "questions.json"

# Environment variable -> settings field
ENV_OVERRIDES: Dict[str, str] = {
    "QUIZBANK_STORE_PATH": "store_path",
    "QUIZBANK_DATABASE_URL": "database_url",
    "QUIZBANK_AUTH_TOKEN": "auth_token",
    "QUIZBANK_MODEL": "model_id",
    "GEMINI_API_KEY": "api_key",
    "QUIZBANK_LOG_LEVEL": "log_level",
    "QUIZBANK_LOG_FILE": "log_file",
}


@dataclass(frozen=True)
class AppSettings:
    """
    Resolved application settings.

    Attributes:
        store_path: Local JSON store file (used when database_url is unset)
        database_url: Firebase Realtime Database root URL
        auth_token: Token sent with database requests
        model_id: Default model for AI extraction
        api_key: Generative model credential
        log_level: Logging level name
        log_file: Optional log file path
    """
    store_path: str = str(DEFAULT_STORE_PATH)
    database_url: Optional[str] = None
    auth_token: Optional[str] = None
    model_id: str = DEFAULT_MODEL
    api_key: Optional[str] = None
    log_level: str = "INFO"
    log_file: Optional[str] = None

    def create_store(self) -> QuestionStore:
        """Database store when a URL is configured, else the local file."""
        if self.database_url:
            return RealtimeDatabaseStore(self.database_url, self.auth_token)
        return JsonFileStore(Path(self.store_path).expanduser())


def _read_settings_file(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        logger.warning(f"Settings file {path} is corrupted, using defaults: {e}")
        return {}
    except OSError as e:
        logger.warning(f"Failed to read settings {path}, using defaults: {e}")
        return {}

    if not isinstance(data, dict):
        logger.warning(f"Settings file {path} is not a JSON object, using defaults")
        return {}
    return data


def load_settings(
    path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> AppSettings:
    """
    Load settings from file and environment.

    Args:
        path: Settings file. Defaults to ~/.quizbank/settings.json.
        environ: Environment mapping. Defaults to os.environ.

    Returns:
        AppSettings with environment values over file values over defaults.
    """
    path = path or DEFAULT_SETTINGS_PATH
    environ = os.environ if environ is None else environ

    known = {f.name for f in fields(AppSettings)}
    data = _read_settings_file(path)
    unknown = sorted(set(data) - known)
    if unknown:
        logger.debug(f"Ignoring unknown settings keys: {unknown}")

    values = {k: v for k, v in data.items() if k in known and v is not None}
    for env_name, field_name in ENV_OVERRIDES.items():
        if environ.get(env_name):
            values[field_name] = environ[env_name]

    return replace(AppSettings(), **{k: str(v) for k, v in values.items()})

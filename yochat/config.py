"""
Persistent API key storage and the runtime settings for one ask.

The key lives in a JSON file in the per-user config directory:
%APPDATA%/yochat on Windows, ~/Library/Application Support/yochat on macOS,
$XDG_CONFIG_HOME/yochat (or ~/.config/yochat) on Linux and the BSDs.
"""

from __future__ import annotations

import json
import os
import sys
from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from yochat.commands import DEFAULT_MARKERS, Markers
from yochat.errors import ConfigError, MissingAPIKeyError
from yochat.request import DEFAULT_BLOB_MIME_TYPES

# ─── Constants ───────────────────────────────────────────────────────────────
APP_NAME = "yochat"
CONFIG_FILE_NAME = "config.json"
CONFIG_DIR_ENV = "XDG_CONFIG_HOME"
API_KEY_ENV_VARS = ("GEMINI_API_KEY", "GOOGLE_API_KEY")
AISTUDIO_URL = "https://aistudio.google.com/app/apikey"

DEFAULT_MODEL = "gemini-2.5-flash-lite"
REQUEST_DEADLINE_SECONDS = 30.0

SYSTEM_INSTRUCTION = (
    "You are an assistant in the terminal that provides direct answers to users' questions "
    "without any further context or filler text. Generate short and precise answers, aim for "
    "less than 100 words. You are in the terminal, so avoid markdown or similar formatting. "
    "If no specific context is provided, assume the question relates to something in the "
    "command line. Wrap every terminal command in <command></command>. This is a one-way chat: "
    "the user cannot provide additional context after your first reply. When you are given a "
    "file, stay concise but still give the user a meaningful answer. If the user asks for a "
    "specific output format, follow it. When the user is just chatting casually, feel free to "
    "be a bit of a savage."
)

_UNIX_PLATFORMS = ("linux", "freebsd", "netbsd", "openbsd")


@dataclass
class Config:
    api_key: str = ""

    def to_dict(self) -> dict:
        return {"api_key": self.api_key}


@dataclass(frozen=True)
class ChatSettings:
    """Everything one ask needs besides the question itself."""
    model: str = DEFAULT_MODEL
    system_instruction: str = SYSTEM_INSTRUCTION
    deadline: float = REQUEST_DEADLINE_SECONDS
    markers: Markers = DEFAULT_MARKERS
    blob_mime_types: frozenset = DEFAULT_BLOB_MIME_TYPES
    copy_commands: bool = True


def config_dir(platform: str | None = None, environ=None) -> Path:
    platform = platform or sys.platform
    environ = os.environ if environ is None else environ

    if platform == "win32":
        app_data = environ.get("APPDATA")
        if not app_data:
            raise ConfigError("APPDATA environment variable not set")
        return Path(app_data) / APP_NAME
    if platform == "darwin":
        return _home() / "Library" / "Application Support" / APP_NAME
    if platform.startswith(_UNIX_PLATFORMS):
        xdg_config_home = environ.get(CONFIG_DIR_ENV)
        if xdg_config_home:
            return Path(xdg_config_home) / APP_NAME
        return _home() / ".config" / APP_NAME
    raise ConfigError(f"unsupported operating system: {platform}")


def _home() -> Path:
    try:
        return Path.home()
    except RuntimeError as e:
        raise ConfigError(f"could not get user home directory: {e}") from e


def config_path(platform: str | None = None, environ=None) -> Path:
    return config_dir(platform, environ) / CONFIG_FILE_NAME


def load_config(path: Path | None = None) -> Config:
    """Read the config file. A missing file is an empty config, not an error."""
    path = path or config_path()
    logger.debug("loading config from {}", path)
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return Config()
    except OSError as e:
        raise ConfigError(f"failed to read config file: {e}") from e

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigError(f"failed to parse config file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config file {path} must contain a JSON object")
    api_key = data.get("api_key") or ""
    if not isinstance(api_key, str):
        raise ConfigError(f"config file {path}: api_key must be a string")
    return Config(api_key=api_key)


def save_config(cfg: Config, path: Path | None = None) -> Path:
    """Write the config, owner-only: 0700 on the directory, 0600 on the file."""
    path = path or config_path()
    tmp = path.with_suffix(".tmp")
    try:
        path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
        os.chmod(path.parent, 0o700)
        fd = os.open(tmp, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(cfg.to_dict(), f, indent=2)
        tmp.replace(path)
        os.chmod(path, 0o600)
    except OSError as e:
        # The temp file holds the key; never leave it behind.
        tmp.unlink(missing_ok=True)
        raise ConfigError(f"failed to write config file: {e}") from e
    logger.debug("saved config to {}", path)
    return path


def resolve_api_key(cfg: Config, environ=None) -> str:
    """Environment variables win over the stored key."""
    environ = os.environ if environ is None else environ
    for name in API_KEY_ENV_VARS:
        if environ.get(name):
            logger.debug("using API key from ${}", name)
            return environ[name]
    if cfg.api_key:
        return cfg.api_key
    raise MissingAPIKeyError()

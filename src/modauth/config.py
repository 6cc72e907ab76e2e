"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for modauth:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.modauth/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Settings file** -- A single :class:`~modauth.models.Settings` JSON
  file holding client defaults and credential *sources*.
* **Precedence resolution** -- :func:`resolve_settings` and
  :func:`resolve_credentials` merge CLI flags, environment variables and
  the settings file into the effective configuration.
* **Credential resolution** -- :func:`resolve_credential` reads secrets
  from env vars, files, or interactive prompts.

Secrets themselves are never written to disk; only the descriptors that
say where to find them are.
"""

from __future__ import annotations

import getpass
import json
import os
import platform
import sys
import tempfile
from pathlib import Path
from typing import Optional

from modauth.exceptions import ConfigError
from modauth.models import Credentials, Settings, Token

_APP_NAME = "modauth"
_CONFIG_FILENAME = "config.json"

ENV_API_KEY = "MODAUTH_API_KEY"
ENV_TOKEN = "MODAUTH_TOKEN"
ENV_BASE_URL = "MODAUTH_BASE_URL"
ENV_TEST_ENV = "MODAUTH_TEST_ENV"

_TRUTHY = {"1", "true", "yes", "on"}


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/modauth/`` (default ``~/.config/modauth/``).
    On macOS/Windows: ``~/.modauth/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/modauth/`` (default ``~/.local/share/modauth/``).
    On macOS/Windows: ``~/.modauth/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file lives next to *path* so ``os.replace`` is an atomic
    rename on POSIX. The temp file is removed on any failure.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Settings file ---


def settings_path() -> Path:
    """Path to the settings file."""
    return get_config_dir() / _CONFIG_FILENAME


def load_settings() -> Settings:
    """Load settings from the config directory.

    Returns:
        The deserialised :class:`~modauth.models.Settings`, or defaults if
        the file does not exist.

    Raises:
        ConfigError: If the file contains invalid JSON or fails validation.
    """
    path = settings_path()
    if not path.is_file():
        return Settings()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return Settings.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid settings at {path}: {exc}") from exc


def save_settings(settings: Settings) -> None:
    """Persist *settings* atomically to disk."""
    data = settings.model_dump(mode="json")
    _atomic_write(settings_path(), json.dumps(data, indent=2) + "\n")


# --- Precedence resolution ---


def resolve_settings(
    cli_base_url: Optional[str] = None,
    cli_test_env: Optional[bool] = None,
) -> Settings:
    """Resolve settings with the full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_base_url``, ``cli_test_env``)
        2. Environment variables (``MODAUTH_BASE_URL``, ``MODAUTH_TEST_ENV``)
        3. Settings file
        4. Defaults
    """
    settings = load_settings()
    client = settings.client

    env_base_url = os.environ.get(ENV_BASE_URL)
    if env_base_url:
        client.base_url = env_base_url
    env_test = os.environ.get(ENV_TEST_ENV)
    if env_test:
        client.test_env = env_test.strip().lower() in _TRUTHY

    if cli_base_url is not None:
        client.base_url = cli_base_url
    if cli_test_env is not None:
        client.test_env = cli_test_env

    return settings


def resolve_credentials(
    settings: Settings,
    cli_api_key: Optional[str] = None,
    cli_token: Optional[str] = None,
) -> Credentials:
    """Build the starting :class:`~modauth.models.Credentials`.

    The API key comes from, in order: ``cli_api_key``, ``MODAUTH_API_KEY``,
    ``settings.api_key_source``. The token, which is optional, follows the
    same order with ``cli_token``, ``MODAUTH_TOKEN`` and
    ``settings.token_source``.

    Raises:
        ConfigError: If no API key can be found or a source cannot be resolved.
    """
    api_key = cli_api_key or os.environ.get(ENV_API_KEY)
    if not api_key and settings.api_key_source:
        api_key = resolve_credential(settings.api_key_source)
    if not api_key:
        raise ConfigError(
            f"No API key configured. Pass --api-key, set {ENV_API_KEY}, "
            "or set 'api_key_source' in the settings file."
        )

    token = cli_token or os.environ.get(ENV_TOKEN)
    if not token and settings.token_source:
        token = resolve_credential(settings.token_source)

    if token:
        return Credentials(api_key=api_key, token=Token(value=token))
    return Credentials.new(api_key)


# --- Credential source resolution ---


def resolve_credential(source: str) -> str:
    """Resolve a credential from its source descriptor.

    Supported formats:
        - ``"env:VAR_NAME"`` -- reads ``os.environ["VAR_NAME"]``
        - ``"file:/path/to/file"`` -- reads file content, stripped of whitespace
        - ``"prompt"`` -- prompts user interactively (requires a TTY)

    Raises:
        ConfigError: If the source can't be resolved.
    """
    if source.startswith("env:"):
        var_name = source[4:]
        value = os.environ.get(var_name)
        if value is None:
            raise ConfigError(
                f"Environment variable '{var_name}' is not set (source: {source})"
            )
        return value

    if source.startswith("file:"):
        path = Path(source[5:]).expanduser()
        if not path.is_file():
            raise ConfigError(f"Credential file not found: {path} (source: {source})")
        try:
            return path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ConfigError(f"Cannot read credential file {path}: {exc}") from exc

    if source == "prompt":
        if not sys.stdin.isatty():
            raise ConfigError(
                "Cannot prompt for credentials: stdin is not a TTY (source: prompt)"
            )
        return getpass.getpass("Enter credential: ")

    raise ConfigError(f"Unknown credential source format: {source}")

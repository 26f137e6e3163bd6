"""Runtime configuration.

Values come from built-in defaults, then an optional dotenv-style config
file, then the ``GITHUB_TOKEN`` environment variable, then command-line flags.
"""

import io
import os
import re
from collections.abc import Mapping
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Optional

from dotenv import dotenv_values

from deadwood.errors import ConfigError

DEFAULT_STALE_DAYS = 30
DEFAULT_EXCLUDE = "main|master|develop|dev"
CONFIG_ENV_VAR = "DEADWOOD_CONFIG"
TOKEN_ENV_VAR = "GITHUB_TOKEN"

# Config file key -> Settings attribute
CONFIG_KEYS = {
    "STALE_DAYS": "stale_days",
    "CHECK_PRS": "check_prs",
    "SCAN_REMOTE": "scan_remote",
    "GITHUB_TOKEN": "token",
    "DRY_RUN": "dry_run",
    "EXCLUDE_PATTERN": "exclude",
}

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


def compile_exclude(pattern: str) -> re.Pattern[str]:
    """Compile an exclusion regex, raising ConfigError when it is invalid."""
    try:
        return re.compile(pattern)
    except re.error as err:
        raise ConfigError(f"Invalid exclude pattern {pattern!r}: {err}") from err


@dataclass(frozen=True)
class Settings:
    """Everything the scanners, selector and executor need to know."""

    stale_days: int = DEFAULT_STALE_DAYS
    check_prs: bool = False
    scan_remote: bool = False
    token: Optional[str] = None
    dry_run: bool = False
    exclude: str = DEFAULT_EXCLUDE
    repos: list[Path] = field(default_factory=lambda: [Path(".")])

    @property
    def exclude_regex(self) -> re.Pattern[str]:
        return compile_exclude(self.exclude)

    def is_excluded(self, branch: str) -> bool:
        """Whether the whole branch name matches the exclude pattern."""
        return self.exclude_regex.fullmatch(branch) is not None

    def validate(self) -> None:
        """Check whole-run preconditions.

        Raises:
            ConfigError: If the settings cannot be used
        """
        if self.stale_days < 0:
            raise ConfigError(f"--days must be zero or positive, got {self.stale_days}")
        if self.scan_remote and not self.token:
            raise ConfigError("Remote scanning requires a GitHub token (--token or GITHUB_TOKEN)")
        compile_exclude(self.exclude)

    def merge(self, **overrides: Any) -> "Settings":
        """Return a copy with every non-None override applied."""
        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise ConfigError(f"Unknown settings: {', '.join(sorted(unknown))}")
        return replace(self, **{key: value for key, value in overrides.items() if value is not None})


def default_config_path() -> Path:
    """Config file location, overridable through ``DEADWOOD_CONFIG``."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / "deadwood" / "config"


def _parse_bool(key: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ConfigError(f"{key} must be true or false, got {value!r}")


def _parse_int(key: str, value: str) -> int:
    try:
        return int(value.strip())
    except ValueError as err:
        raise ConfigError(f"{key} must be an integer, got {value!r}") from err


def config_values(raw: Mapping[str, Optional[str]], source: str = "<config>") -> dict[str, Any]:
    """Convert raw ``KEY -> value`` strings into Settings keyword arguments.

    Unknown keys are ignored. A key without ``=`` counts as empty.
    """
    values: dict[str, Any] = {}
    for key, value in raw.items():
        attr = CONFIG_KEYS.get(key)
        if attr is None:
            continue
        value = value or ""
        try:
            if attr == "stale_days":
                values[attr] = _parse_int(key, value)
            elif attr in ("check_prs", "scan_remote", "dry_run"):
                values[attr] = _parse_bool(key, value)
            else:
                values[attr] = value if attr == "exclude" else (value or None)
        except ConfigError as err:
            raise ConfigError(f"{source}: {err}") from err
    return values


def parse_config_text(text: str, source: str = "<config>") -> dict[str, Any]:
    """Parse dotenv-style ``KEY=value`` text into Settings keyword arguments.

    Comments, quoting and an ``export`` prefix follow python-dotenv rules.
    Variables are not interpolated.
    """
    return config_values(dotenv_values(stream=io.StringIO(text), interpolate=False), source=source)


def load_config_file(path: Path) -> dict[str, Any]:
    """Read a config file. A missing file yields no values."""
    if not path.is_file():
        return {}
    try:
        raw = dotenv_values(path, interpolate=False, encoding="utf-8")
    except OSError as err:
        raise ConfigError(f"Cannot read config file {path}: {err}") from err
    return config_values(raw, source=str(path))


def load_settings(config_path: Optional[Path] = None, **overrides: Any) -> Settings:
    """Build Settings from defaults, config file, environment and overrides."""
    settings = Settings().merge(**load_config_file(config_path or default_config_path()))
    env_token = os.environ.get(TOKEN_ENV_VAR)
    if env_token:
        settings = settings.merge(token=env_token)
    return settings.merge(**overrides)

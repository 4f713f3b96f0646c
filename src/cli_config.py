"""Runtime settings assembled from defaults, a YAML config file and CLI flags.

CLI flags have the highest precedence, then the config file, then the
built-in defaults in ``constants.Constants``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import yaml

from constants import Constants
from errors import ConfigError
from finder.finder import FinderOptions

logger = logging.getLogger(__name__)

_KNOWN_KEYS = {
    "workers",
    "retries",
    "timeout",
    "retry_delay",
    "pom_attempts",
    "repositories",
    "repos_file",
    "ignore_scopes",
    "ignore_optional",
    "ignore_transitive",
    "recursive",
    "exit_code",
}


@dataclass(frozen=True)
class Settings:  # pylint: disable=too-many-instance-attributes
    """Effective configuration for one run."""

    workers: int = Constants.WORKERS
    retries: int = Constants.HTTP_RETRIES
    timeout: float = Constants.HTTP_TIMEOUT
    retry_delay: float = Constants.HTTP_RETRY_DELAY_SEC
    pom_attempts: int = Constants.POM_FETCH_ATTEMPTS
    repositories: Tuple[str, ...] = tuple(Constants.DEFAULT_REPOS)
    ignore_scopes: Tuple[str, ...] = tuple(Constants.DEFAULT_IGNORE_SCOPES)
    ignore_optional: bool = True
    ignore_transitive: bool = True
    recursive: bool = True
    exit_code: bool = False

    def finder_options(self) -> FinderOptions:
        return FinderOptions(
            ignore_scopes=list(self.ignore_scopes),
            ignore_optional=self.ignore_optional,
            ignore_transitive=self.ignore_transitive,
            recursive_search=self.recursive,
            pom_attempts=self.pom_attempts,
        )

    def validate(self) -> None:
        """Raise ConfigError if values can't work."""
        if self.workers < 1:
            raise ConfigError(f"workers must be positive, got {self.workers}")
        if self.retries < 1:
            raise ConfigError(f"retries must be at least 1, got {self.retries}")
        if self.timeout <= 0:
            raise ConfigError(f"timeout must be positive, got {self.timeout}")
        if self.retry_delay < 0:
            raise ConfigError(f"retry delay can't be negative, got {self.retry_delay}")
        if self.pom_attempts < 1:
            raise ConfigError(f"pom attempts must be at least 1, got {self.pom_attempts}")
        if not self.repositories:
            raise ConfigError("repository list is empty")


def load_config_file(path: str) -> Dict[str, Any]:
    """Load settings from a YAML file.

    A top-level ``pomfinder:`` section is used if present, otherwise the
    whole document.

    Raises:
        ConfigError: If the file can't be read or isn't a mapping.
    """
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except OSError as e:
        raise ConfigError(f"can't read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in config file {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"config file {path} must contain a mapping")
    section = data.get(Constants.CONFIG_SECTION, data)
    if not isinstance(section, dict):
        raise ConfigError(f"'{Constants.CONFIG_SECTION}' section in {path} must be a mapping")

    for key in section:
        if key not in _KNOWN_KEYS:
            logger.warning("Unknown config key ignored: %s", key)
    return {k: v for k, v in section.items() if k in _KNOWN_KEYS}


def read_repos_file(path: str) -> List[str]:
    """Just a helper for reading a file with repo URLs.

    Blank lines and lines starting with '#' are skipped.

    Raises:
        ConfigError: If the file can't be read.
    """
    try:
        with open(path, "r", encoding="utf-8") as fh:
            lines = [line.strip() for line in fh]
    except OSError as e:
        raise ConfigError(f"can't read repos file {path}: {e}") from e
    return [line.rstrip("/") for line in lines if line and not line.startswith("#")]


def split_scopes(value: Any) -> Tuple[str, ...]:
    """Accept "test,provided" or a list and return a tuple of scope names."""
    if value is None:
        return ()
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, (list, tuple)):
        items = [str(v) for v in value]
    else:
        raise ConfigError(f"scopes must be a string or a list, got {value!r}")
    return tuple(item.strip() for item in items if item.strip())


def _as_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("1", "true", "yes", "on"):
        return True
    if isinstance(value, str) and value.strip().lower() in ("0", "false", "no", "off"):
        return False
    raise ConfigError(f"'{key}' must be a boolean, got {value!r}")


def _as_number(key: str, value: Any, kind):
    try:
        return kind(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"'{key}' must be a number, got {value!r}") from e


def _pick(cli_value: Any, config: Dict[str, Any], key: str, default: Any) -> Any:
    if cli_value is not None:
        return cli_value
    return config.get(key, default)


def build_settings(args, config: Optional[Dict[str, Any]] = None) -> Settings:
    """Merge CLI arguments over the config file over defaults.

    Args:
        args: Parsed CLI arguments (see ``args.parse_args``).
        config: Already loaded config mapping; loaded from ``args.CONFIG``
            when not given.

    Raises:
        ConfigError: On unreadable files or invalid values.
    """
    if config is None:
        config_path = getattr(args, "CONFIG", None)
        config = load_config_file(config_path) if config_path else {}

    defaults = Settings()

    repos_file = getattr(args, "REPOS_FILE", None)
    if repos_file:
        repositories = read_repos_file(repos_file)
    elif config.get("repositories") is not None:
        raw = config["repositories"]
        if not isinstance(raw, list):
            raise ConfigError("'repositories' must be a list of URLs")
        repositories = [str(r).strip().rstrip("/") for r in raw if str(r).strip()]
    elif config.get("repos_file"):
        repositories = read_repos_file(str(config["repos_file"]))
    else:
        repositories = list(defaults.repositories)

    scopes = getattr(args, "IGNORE_SCOPES", None)
    if scopes is None:
        scopes = config.get("ignore_scopes", list(defaults.ignore_scopes))

    settings = Settings(
        workers=_as_number("workers", _pick(getattr(args, "WORKERS", None), config, "workers", defaults.workers), int),
        retries=_as_number("retries", _pick(getattr(args, "RETRIES", None), config, "retries", defaults.retries), int),
        timeout=_as_number("timeout", _pick(getattr(args, "TIMEOUT", None), config, "timeout", defaults.timeout), float),
        retry_delay=_as_number(
            "retry_delay",
            _pick(getattr(args, "RETRY_DELAY", None), config, "retry_delay", defaults.retry_delay),
            float,
        ),
        pom_attempts=_as_number(
            "pom_attempts",
            _pick(getattr(args, "POM_ATTEMPTS", None), config, "pom_attempts", defaults.pom_attempts),
            int,
        ),
        repositories=tuple(repositories),
        ignore_scopes=split_scopes(scopes),
        ignore_optional=_as_bool(
            "ignore_optional",
            _pick(getattr(args, "IGNORE_OPTIONAL", None), config, "ignore_optional", defaults.ignore_optional),
        ),
        ignore_transitive=_as_bool(
            "ignore_transitive",
            _pick(getattr(args, "IGNORE_TRANSITIVE", None), config, "ignore_transitive", defaults.ignore_transitive),
        ),
        recursive=_as_bool(
            "recursive",
            _pick(getattr(args, "RECURSIVE", None), config, "recursive", defaults.recursive),
        ),
        exit_code=_as_bool(
            "exit_code",
            _pick(getattr(args, "EXIT_CODE", None), config, "exit_code", defaults.exit_code),
        ),
    )
    settings.validate()
    return settings

"""Inventory settings loading and validation.

Settings come from an optional YAML file plus environment overrides
(a ``.env`` file is honoured via python-dotenv). Non-strict mode warns and
falls back to defaults; strict mode raises ``ConfigValidationError``.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, replace
from typing import Any, Optional

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Load .env file (idempotent; does nothing if already loaded or missing)
# ---------------------------------------------------------------------------
load_dotenv()

ENV_MAX_WORKERS = "ENUM_INVENTORY_MAX_WORKERS"
ENV_REPORT_DIR = "ENUM_INVENTORY_REPORT_DIR"
ENV_STRICT = "STRICT_CONFIG_VALIDATION"

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR"}


class ConfigValidationError(RuntimeError):
    """Raised when strict settings validation fails."""


@dataclass(frozen=True)
class InventorySettings:
    """Runtime settings for an inventory run."""

    max_workers: int = 0  # 0 selects the ThreadPoolExecutor default
    continue_on_project_error: bool = False
    report_dir: Optional[str] = None
    extra_excluded_dirs: frozenset[str] = field(default_factory=frozenset)
    log_level: str = "INFO"

    @property
    def effective_max_workers(self) -> Optional[int]:
        """Worker count for ThreadPoolExecutor (None selects its default)."""
        return self.max_workers if self.max_workers > 0 else None


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def resolve_strict_config_validation(default: bool = False) -> bool:
    """Resolve strict validation mode from ``STRICT_CONFIG_VALIDATION`` env."""
    return _env_flag(ENV_STRICT, default=default)


def _fail(msg: str, strict: bool) -> None:
    if strict:
        raise ConfigValidationError(msg)
    logger.warning("%s; using default", msg)


def load_settings_file(path: str, strict: bool = False) -> dict[str, Any]:
    """Load and parse a YAML settings file.

    In non-strict mode this returns an empty dict on parse/read failures.
    In strict mode this raises ``ConfigValidationError``.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            payload = yaml.safe_load(f)
    except FileNotFoundError as exc:
        msg = f"Settings file not found: {path}"
        if strict:
            raise ConfigValidationError(msg) from exc
        logger.warning("%s; continuing with defaults", msg)
        return {}
    except yaml.YAMLError as exc:
        msg = f"Failed to parse settings YAML at {path}: {exc}"
        if strict:
            raise ConfigValidationError(msg) from exc
        logger.warning("%s; continuing with defaults", msg)
        return {}

    if payload is None:
        return {}

    if not isinstance(payload, dict):
        msg = f"Unexpected settings payload type: {type(payload).__name__}"
        if strict:
            raise ConfigValidationError(msg)
        logger.warning("%s; continuing with defaults", msg)
        return {}

    return payload


def _parse_max_workers(raw: Any, source: str, strict: bool) -> Optional[int]:
    try:
        value = int(raw)
    except (TypeError, ValueError):
        _fail(f"{source}: max_workers must be an integer, got {raw!r}", strict)
        return None
    if value < 0:
        _fail(f"{source}: max_workers must be >= 0, got {value}", strict)
        return None
    return value


def settings_from_mapping(
    payload: dict[str, Any],
    strict: bool = False,
    base: InventorySettings | None = None,
) -> InventorySettings:
    """Validate a settings mapping and merge it onto ``base``."""
    settings = base or InventorySettings()
    updates: dict[str, Any] = {}

    unknown = sorted(set(payload) - {
        "max_workers",
        "continue_on_project_error",
        "report_dir",
        "extra_excluded_dirs",
        "log_level",
    })
    if unknown:
        _fail(f"Unknown settings keys: {', '.join(unknown)}", strict)

    if "max_workers" in payload:
        workers = _parse_max_workers(payload["max_workers"], "settings", strict)
        if workers is not None:
            updates["max_workers"] = workers

    if "continue_on_project_error" in payload:
        raw = payload["continue_on_project_error"]
        if isinstance(raw, bool):
            updates["continue_on_project_error"] = raw
        else:
            _fail(f"continue_on_project_error must be a boolean, got {raw!r}", strict)

    if payload.get("report_dir") is not None:
        updates["report_dir"] = str(payload["report_dir"])

    if "extra_excluded_dirs" in payload:
        raw = payload["extra_excluded_dirs"]
        if isinstance(raw, list) and all(isinstance(d, str) for d in raw):
            updates["extra_excluded_dirs"] = frozenset(d.strip() for d in raw if d.strip())
        else:
            _fail("extra_excluded_dirs must be a list of directory names", strict)

    if "log_level" in payload:
        level = str(payload["log_level"]).strip().upper()
        if level in _LOG_LEVELS:
            updates["log_level"] = level
        else:
            _fail(f"log_level must be one of {sorted(_LOG_LEVELS)}, got {level!r}", strict)

    return replace(settings, **updates)


def apply_env_overrides(
    settings: InventorySettings,
    strict: bool = False,
) -> InventorySettings:
    """Apply ``ENUM_INVENTORY_*`` environment overrides."""
    updates: dict[str, Any] = {}

    raw_workers = os.getenv(ENV_MAX_WORKERS)
    if raw_workers is not None and raw_workers.strip():
        workers = _parse_max_workers(raw_workers.strip(), ENV_MAX_WORKERS, strict)
        if workers is not None:
            updates["max_workers"] = workers

    raw_report_dir = os.getenv(ENV_REPORT_DIR)
    if raw_report_dir is not None and raw_report_dir.strip():
        updates["report_dir"] = raw_report_dir.strip()

    return replace(settings, **updates)


def load_inventory_settings(
    config_path: str | None = None,
    strict: bool = False,
) -> InventorySettings:
    """Resolve settings: defaults, then the YAML file, then the environment."""
    settings = InventorySettings()
    if config_path:
        payload = load_settings_file(config_path, strict=strict)
        settings = settings_from_mapping(payload, strict=strict, base=settings)
    settings = apply_env_overrides(settings, strict=strict)
    logger.debug("Resolved inventory settings: %s", settings)
    return settings

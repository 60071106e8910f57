"""Core shared contracts and utilities."""

from core.structured_logging import (
    configure_structured_logging,
    get_project,
    get_run_id,
    phase_scope,
    project_scope,
    set_run_id,
    submit_in_context,
)
from core.settings import (
    ConfigValidationError,
    InventorySettings,
    apply_env_overrides,
    load_inventory_settings,
    load_settings_file,
    resolve_strict_config_validation,
    settings_from_mapping,
)
from core.run_artifacts import build_run_report, write_run_report

__all__ = [
    "configure_structured_logging",
    "get_project",
    "get_run_id",
    "phase_scope",
    "project_scope",
    "set_run_id",
    "submit_in_context",
    "ConfigValidationError",
    "InventorySettings",
    "apply_env_overrides",
    "load_inventory_settings",
    "load_settings_file",
    "resolve_strict_config_validation",
    "settings_from_mapping",
    "build_run_report",
    "write_run_report",
]

# moustachu/config/loader.py
"""
Handles loading and merging of run defaults from TOML files.
"""
import toml
from pathlib import Path
from typing import Any, Dict, Optional
from dataclasses import fields as dataclass_fields, MISSING
import structlog

from .settings import RenderConfig, DataFormat

log = structlog.get_logger(__name__)

PROJECT_CONFIG_FILENAMES = [".moustachu.toml", "moustachu.toml", "pyproject.toml"]
USER_CONFIG_DIR = Path.home() / ".config" / "moustachu"
USER_CONFIG_FILE = USER_CONFIG_DIR / "config.toml"

CONFIG_KEY_TO_RENDERCONFIG_ATTR_MAP: Dict[str, str] = {
    "output_file": "output_file",
    "data_format": "data_format",
    "partials": "partials",
    "partials_dir": "partials_dir",
    "partial_extension": "partial_extension",
    "max_partial_depth": "max_partial_depth",
    "strip_bom": "strip_bom",
}

_PATH_ATTRS = ("output_file", "partials_dir")


def _load_toml_file_data(file_path: Path) -> Dict[str, Any]:
    if not file_path.is_file(): return {}
    log.debug("loading_toml_config_file", path=str(file_path))
    try:
        data = toml.load(file_path)
    except (OSError, toml.TomlDecodeError) as e:
        log.error("config_file_load_error", path=str(file_path), error=str(e))
        return {}
    return data.get("tool", {}).get("moustachu", {}) if file_path.name == "pyproject.toml" else data


def load_and_merge_configs(search_dir: Optional[Path] = None) -> Dict[str, Any]:
    # user-level config first, then the first project config found overrides it.
    search_dir = search_dir or Path.cwd()
    merged_toml_data: Dict[str, Any] = {}
    if USER_CONFIG_FILE.is_file():
        log.info("loading_user_global_config", path=str(USER_CONFIG_FILE))
        merged_toml_data.update(_load_toml_file_data(USER_CONFIG_FILE))

    for filename in PROJECT_CONFIG_FILENAMES:
        candidate = search_dir / filename
        if candidate.is_file():
            log.info("loading_project_local_config", path=str(candidate))
            project_settings = _load_toml_file_data(candidate)
            if project_settings:
                user_profiles = merged_toml_data.get("profiles", {})
                project_profiles = project_settings.pop("profiles", {})
                if project_profiles and isinstance(project_profiles, dict):
                    if isinstance(user_profiles, dict):
                        merged_toml_data["profiles"] = {**user_profiles, **project_profiles}
                    else:
                        merged_toml_data["profiles"] = project_profiles
                merged_toml_data.update(project_settings)
                log.debug("project_config_applied", source_file=str(candidate))
                break
    if not merged_toml_data: log.debug("no_configuration_files_loaded")
    return merged_toml_data


def _coerce_config_value(attr: str, value: Any) -> Any:
    # toml gives strings and tables; RenderConfig wants paths and enums.
    if attr in _PATH_ATTRS and isinstance(value, str):
        return Path(value) if value else None
    if attr == "partials" and isinstance(value, dict):
        return {str(name): Path(p) for name, p in value.items()}
    if attr == "data_format" and isinstance(value, str):
        return DataFormat.from_string(value)
    return value


def config_defaults_from_toml(raw_configs: Dict[str, Any], profile_name: Optional[str] = None) -> Dict[str, Any]:
    """Turns merged TOML data (plus an optional profile) into RenderConfig kwargs."""
    effective_options: Dict[str, Any] = {}
    for fd_init in dataclass_fields(RenderConfig):
        if fd_init.init:
            effective_options[fd_init.name] = fd_init.default_factory() if fd_init.default_factory is not MISSING else fd_init.default

    layers = [raw_configs]
    if profile_name:
        profile_values = raw_configs.get("profiles", {}).get(profile_name, {})
        if profile_values:
            log.info("applying_profile_settings", profile=profile_name)
            layers.append(profile_values)
        else:
            log.warning("profile_not_found_in_config_files", profile_name=profile_name)

    for layer in layers:
        for toml_k, rc_attr in CONFIG_KEY_TO_RENDERCONFIG_ATTR_MAP.items():
            if toml_k in layer:
                effective_options[rc_attr] = _coerce_config_value(rc_attr, layer[toml_k])
    return effective_options

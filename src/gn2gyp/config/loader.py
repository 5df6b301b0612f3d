"""
Configuration loader for gn2gyp.

Handles loading translator configuration from YAML files and arguments.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from gn2gyp.config.models import GypToolset, SubprojectConfig, TranslatorConfig
from gn2gyp.errors import Gn2GypError


class ConfigurationError(Gn2GypError):
    """Raised when configuration is invalid."""

    pass


def validate_subprojects(config: TranslatorConfig) -> TranslatorConfig:
    """Check subproject names are unique and the placeholder owner exists."""
    names = [sub.name for sub in config.subprojects]
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise ConfigurationError(f"Duplicate subproject names: {duplicates}")

    if config.placeholder_subproject and config.placeholder_subproject not in names:
        raise ConfigurationError(
            f"placeholder_subproject '{config.placeholder_subproject}' is not a "
            f"configured subproject. Known subprojects: {names}"
        )
    return config


def load_config_from_yaml(config_path: Path) -> TranslatorConfig:
    """Load configuration from a YAML file."""
    if not config_path.exists():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    with open(config_path) as f:
        try:
            raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in configuration file: {e}")

    if raw_config is None:
        raise ConfigurationError("Configuration file is empty")

    try:
        config = TranslatorConfig(**raw_config)
    except ValidationError as e:
        raise ConfigurationError(f"Configuration validation failed:\n{e}")

    return validate_subprojects(config)


def create_config(
    root_target: str,
    build_name: str,
    toolchain_map: dict[str, str],
    excluded_prefixes: list[str] | None = None,
    subprojects: list[dict[str, Any]] | None = None,
    **kwargs: Any,
) -> TranslatorConfig:
    """Create configuration from arguments."""
    try:
        toolsets = {
            toolchain: GypToolset(toolset.lower()) for toolchain, toolset in toolchain_map.items()
        }
    except ValueError as e:
        raise ConfigurationError(
            f"Invalid toolset in toolchain map: {e}. "
            f"Valid toolsets: {[t.value for t in GypToolset]}"
        )

    try:
        config = TranslatorConfig(
            root_target=root_target,
            build_name=build_name,
            toolchain_map=toolsets,
            excluded_prefixes=excluded_prefixes or [],
            subprojects=[SubprojectConfig(**sub) for sub in subprojects or []],
            **kwargs,
        )
    except ValidationError as e:
        raise ConfigurationError(f"Configuration validation failed:\n{e}")

    return validate_subprojects(config)


def generate_default_config(output_path: Path) -> None:
    """Generate a default configuration file."""
    default_config = {
        "root_target": "//:libproject",
        "build_name": "debug",
        "toolchain_map": {
            "//build/toolchain:gcc_like_host": "host",
            "//build/toolchain:gcc_like": "target",
        },
        "excluded_prefixes": ["//build/bootstrap"],
        "shared_intermediate_token": "<(SHARED_INTERMEDIATE_DIR)/",
        "project_root_token": "../",
        "placeholder_source": "empty.cc",
        "placeholder_target": "gen_empty_cc",
        "python_executable": "python",
        "emit_link_libraries": False,
        "subprojects": [],
        "fetch": {
            "builds": ["debug", "release"],
            "max_concurrency": 8,
        },
    }

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        yaml.dump(default_config, f, default_flow_style=False, sort_keys=False)

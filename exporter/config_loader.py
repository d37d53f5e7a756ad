"""
Configuration Loader Module for canvasform

This module loads the provider-specific export tables (resource families,
fallback names, HCL block registries) and the optional user settings file
that controls the provider preamble and default tags.

"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional
import importlib
import logging

import yaml

from exporter.exceptions import CanvasFormError

# Configure logging
logger = logging.getLogger(__name__)

# Module name mapping for each provider
PROVIDER_CONFIG_MODULES = {
    "aws": "exporter.config.cloud_config_aws",
}

# Supported providers
SUPPORTED_PROVIDERS = ["aws"]


class ConfigurationError(CanvasFormError):
    """Raised when configuration loading fails."""

    pass


@dataclass
class ExportSettings:
    """User-tunable export settings.

    Attributes:
        provider: Provider whose tables drive the export
        default_region: Region used when no node carries a ``region`` property
        default_tags: Tags merged into every taggable resource
        icon_origin: Prefix for relative icon paths in diagram exports
    """

    provider: str = "aws"
    default_region: Optional[str] = None
    default_tags: Dict[str, str] = field(default_factory=dict)
    icon_origin: str = ""

    @classmethod
    def defaults(cls, provider: str = "aws") -> "ExportSettings":
        config = load_config(provider)
        return cls(
            provider=provider,
            default_region=config.DEFAULT_REGION,
            default_tags=dict(config.DEFAULT_TAGS),
        )


def load_config(provider: str) -> Any:
    """
    Load provider-specific configuration module dynamically.

    Args:
        provider: Cloud provider name ('aws')

    Returns:
        Provider-specific configuration module with constants and mappings

    Raises:
        ValueError: If provider not supported
        ConfigurationError: If configuration module cannot be loaded

    Examples:
        >>> aws_config = load_config('aws')
        >>> aws_config.PROVIDER_NAME
        'AWS'
    """
    provider = provider.lower()
    if provider not in SUPPORTED_PROVIDERS:
        raise ValueError(
            f"Provider '{provider}' not supported. "
            f"Must be one of: {', '.join(SUPPORTED_PROVIDERS)}"
        )

    module_name = PROVIDER_CONFIG_MODULES.get(provider)
    if not module_name:
        raise ConfigurationError(
            f"No configuration module mapped for provider '{provider}'"
        )

    try:
        config_module = importlib.import_module(module_name)
        logger.debug(
            f"Loaded configuration for provider '{provider}' from {module_name}"
        )
    except ImportError as e:
        logger.error(f"Failed to import configuration for provider '{provider}': {e}")
        raise ConfigurationError(
            f"Could not load configuration for provider '{provider}'. "
            f"Module '{module_name}' not found or has import errors. "
            f"Error: {e}"
        ) from e

    validate_config_module(config_module, provider)
    return config_module


def validate_config_module(config_module: Any, provider: str) -> bool:
    """
    Validate that a configuration module has the tables the compiler reads.

    Raises:
        ConfigurationError: If validation fails
    """
    required_attrs = [
        "PROVIDER_NAME",
        "PROVIDER_BLOCK",
        "DEFAULT_REGION",
        "AWS_RESOURCE_FAMILIES",
        "AWS_BLOCK_KEYS",
    ]

    missing_attrs = [a for a in required_attrs if not hasattr(config_module, a)]
    if missing_attrs:
        raise ConfigurationError(
            f"Configuration module for provider '{provider}' is missing required attributes: "
            f"{', '.join(missing_attrs)}",
            {"provider": provider},
        )

    logger.debug(f"Configuration module for '{provider}' passed validation")
    return True


def load_settings(path: Optional[str] = None) -> ExportSettings:
    """Read export settings from a YAML file, falling back to provider defaults.

    Recognised keys are ``provider``, ``default_region``, ``default_tags`` and
    ``icon_origin``. Anything else in the file is ignored.

    Raises:
        ConfigurationError: If the file cannot be read or is not a mapping
    """
    if not path:
        return ExportSettings.defaults()

    try:
        with open(path, "r") as file:
            document = yaml.safe_load(file) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(
            f"Could not read settings file: {e}", {"path": path}
        ) from e

    if not isinstance(document, dict):
        raise ConfigurationError(
            "Settings file must contain a mapping at the top level", {"path": path}
        )

    provider = str(document.get("provider", "aws"))
    settings = ExportSettings.defaults(provider)
    if document.get("default_region"):
        settings.default_region = str(document["default_region"])
    tags = document.get("default_tags")
    if isinstance(tags, dict):
        settings.default_tags = {str(k): str(v) for k, v in tags.items()}
    elif tags is not None:
        logger.warning(f"Ignoring default_tags in {path}: expected a mapping")
    if document.get("icon_origin"):
        settings.icon_origin = str(document["icon_origin"])
    logger.info(f"Loaded export settings from {path}")
    return settings

"""Rule catalog loader for linkscrub.

This module turns a rule catalog (a JSON or YAML file, or an already
parsed mapping) into a ProviderRegistry. Providers are created in the
catalog's order, which decides redirect and cancel precedence.
"""

import json
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from linkscrub.core.constants import CATALOG_ENV_VAR
from linkscrub.core.exceptions import CatalogError, ConfigError
from linkscrub.rules.provider import Provider
from linkscrub.rules.registry import ProviderRegistry


# Catalog record keys holding lists of patterns, with their registration method
PATTERN_FIELDS = {
    "rules": "add_rule",
    "rawRules": "add_raw_rule",
    "referralMarketing": "add_referral_marketing",
    "exceptions": "add_exception",
    "redirections": "add_redirection",
}

FLAG_FIELDS = ("completeProvider", "forceRedirection")


# ============================================================================
# Catalog Paths
# ============================================================================

def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ./configs under the current working directory
    """
    return Path.cwd() / "configs"


def get_catalog_path() -> Path:
    """Resolve the default catalog path.

    Returns:
        ``$LINKSCRUB_CATALOG`` if set, otherwise configs/catalog.yaml
    """
    override = os.environ.get(CATALOG_ENV_VAR)
    if override:
        return Path(override)
    return get_config_dir() / "catalog.yaml"


# ============================================================================
# Catalog Loader
# ============================================================================

def load_catalog(catalog_file: Path | str | None = None) -> ProviderRegistry:
    """Load a rule catalog file.

    Args:
        catalog_file: Path to a .json, .yaml or .yml catalog. If None,
            uses get_catalog_path()

    Returns:
        ProviderRegistry with one Provider per catalog entry

    Raises:
        ConfigError: If the file is missing or cannot be parsed
        CatalogError: If the catalog structure is invalid
        InvalidRulePattern: If a pattern does not compile
    """
    catalog_path = Path(catalog_file) if catalog_file is not None else get_catalog_path()

    if not catalog_path.exists():
        raise ConfigError(f"Catalog file not found: {catalog_path}")

    try:
        with catalog_path.open("r", encoding="utf-8") as f:
            if catalog_path.suffix.lower() == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Failed to parse catalog JSON: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse catalog YAML: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read catalog file: {e}") from e

    if not data:
        raise CatalogError(f"Catalog is empty: {catalog_path}")

    return build_registry(data)


def build_registry(data: Mapping[str, Any]) -> ProviderRegistry:
    """Build a registry from a parsed catalog.

    Accepts either the provider mapping itself or a document whose
    ``providers`` key holds it.

    Raises:
        CatalogError: If the catalog structure is invalid
        InvalidRulePattern: If a pattern does not compile
    """
    if not isinstance(data, Mapping):
        raise CatalogError("Catalog must be a mapping of provider names to records")

    providers_data = data.get("providers", data)
    if not isinstance(providers_data, Mapping):
        raise CatalogError("'providers' must be a mapping")

    return ProviderRegistry(
        build_provider(name, record) for name, record in providers_data.items()
    )


def build_provider(name: str, record: Mapping[str, Any]) -> Provider:
    """Create one Provider from its catalog record.

    Missing lists count as empty and missing flags as false.
    """
    if not isinstance(record, Mapping):
        raise CatalogError(f"Invalid provider record for '{name}'")

    for flag in FLAG_FIELDS:
        if not isinstance(record.get(flag, False), bool):
            raise CatalogError(f"'{flag}' must be a boolean in provider '{name}'")

    provider = Provider(
        str(name),
        complete_provider=record.get("completeProvider", False),
        force_redirection=record.get("forceRedirection", False),
    )

    url_pattern = record.get("urlPattern")
    if url_pattern is not None and not isinstance(url_pattern, str):
        raise CatalogError(f"'urlPattern' must be a string in provider '{name}'")
    provider.set_url_pattern(url_pattern)

    for field, method_name in PATTERN_FIELDS.items():
        add = getattr(provider, method_name)
        for pattern in _string_list(record, field, name):
            add(pattern)

    for method in _string_list(record, "methods", name):
        provider.add_method(method)

    return provider


def _string_list(record: Mapping[str, Any], field: str, provider_name: str) -> list[str]:
    values = record.get(field) or []
    if not isinstance(values, list):
        raise CatalogError(f"'{field}' must be a list in provider '{provider_name}'")
    for value in values:
        if not isinstance(value, str):
            raise CatalogError(
                f"'{field}' entries must be strings in provider '{provider_name}', got {value!r}"
            )
    return values

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import yaml
from pydantic import ValidationError

from menukit.rules.models import MenuRules

if TYPE_CHECKING:
    from menukit.components.menus._impl import MenuServiceConfig


def load_rules(path: Path) -> MenuRules:
    """
    Load and validate the menu rules file.
    Raises FileNotFoundError if file missing.
    Raises ValueError if the YAML or the schema is invalid.
    """
    if not path.exists():
        raise FileNotFoundError(f"Rules file not found at: {path}")

    with open(path) as f:
        content = f.read()

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML syntax in rules file: {e}") from e

    # An empty file means all defaults
    if data is None:
        data = {}

    try:
        return MenuRules.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Rules validation failed:\n{e}") from e


def config_from_rules(rules: MenuRules) -> MenuServiceConfig:
    """Translate validated rules into the service configuration."""
    from menukit.components.menus._impl import MenuServiceConfig

    bootstrap = rules.bootstrap
    return MenuServiceConfig(
        require_translations=rules.translations.required,
        translations_enabled=rules.translations.enabled,
        forgiving_bootstrap=bootstrap.forgiving,
        reconcile_on_add=bootstrap.reconcile_on_add,
        reconcile_on_resolve=bootstrap.reconcile_on_resolve,
        deterministic_ids=bootstrap.deterministic_ids,
        allow_collapsible_without_children=bootstrap.allow_collapsible_without_children,
    )

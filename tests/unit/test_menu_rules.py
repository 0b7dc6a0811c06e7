"""
Tests for loading menu rules.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from menukit.rules.loader import config_from_rules, load_rules
from menukit.rules.models import MenuRules


def _write(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "menu_rules.yaml"
    path.write_text(content)
    return path


class TestLoadRules:
    def test_load_project_rules(self, rules_path: Path) -> None:
        rules = load_rules(rules_path)
        assert rules.rules_version == "1"
        assert rules.translations.required is True
        assert rules.bootstrap.forgiving is False
        assert rules.bootstrap.reconcile_on_add is None

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_rules(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="Invalid YAML"):
            load_rules(_write(tmp_path, "bootstrap: [unclosed"))

    def test_unknown_section(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="Rules validation failed"):
            load_rules(_write(tmp_path, "caching:\n  enabled: true\n"))

    def test_wrong_type(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="Rules validation failed"):
            load_rules(_write(tmp_path, "translations:\n  required: maybe\n"))

    def test_empty_file_means_defaults(self, tmp_path: Path) -> None:
        assert load_rules(_write(tmp_path, "")) == MenuRules()


class TestConfigFromRules:
    def test_defaults(self) -> None:
        config = config_from_rules(MenuRules())
        assert config.translations_required
        assert not config.use_deterministic_ids
        assert not config.tolerate_collapsible_without_children

    def test_disabled_translations_are_not_required(self, tmp_path: Path) -> None:
        rules = load_rules(_write(tmp_path, "translations:\n  enabled: false\n"))
        assert not config_from_rules(rules).translations_required

    def test_bootstrap_overrides(self, tmp_path: Path) -> None:
        rules = load_rules(
            _write(tmp_path, "bootstrap:\n  forgiving: true\n  deterministic_ids: false\n")
        )
        config = config_from_rules(rules)
        assert config.forgiving_bootstrap
        assert config.should_reconcile_on_add
        assert not config.use_deterministic_ids

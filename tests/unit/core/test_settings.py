"""Unit tests for ConverterSettings and load_settings."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from cp2fm.core.settings import DEFAULT_HANDLERS, ConverterSettings, load_settings
from cp2fm.exceptions import SettingsError


class TestConverterSettings:
    def test_defaults(self):
        settings = ConverterSettings()
        assert settings.strict_validation is False
        assert settings.merge_configurations is False
        assert settings.bundles_start_order == 0
        assert settings.handlers == DEFAULT_HANDLERS

    def test_default_handlers_not_shared(self):
        ConverterSettings().handlers.append("cfg")
        assert ConverterSettings().handlers == DEFAULT_HANDLERS

    def test_handlers_normalized(self):
        assert ConverterSettings(handlers=[" XML ", "Bundle"]).handlers == ["xml", "bundle"]

    def test_unknown_handler(self):
        with pytest.raises(ValidationError, match="Unknown handlers: osgi"):
            ConverterSettings(handlers=["bundle", "osgi"])

    def test_duplicate_handler(self):
        with pytest.raises(ValidationError, match="listed twice"):
            ConverterSettings(handlers=["cfg", "CFG"])

    def test_negative_start_order(self):
        with pytest.raises(ValidationError):
            ConverterSettings(bundles_start_order=-1)

    def test_extra_keys_forbidden(self):
        with pytest.raises(ValidationError):
            ConverterSettings(unknown=True)


class TestLoadSettings:
    def test_yaml(self, tmp_path: Path):
        path = tmp_path / "cp2fm.yaml"
        path.write_text(
            "merge_configurations: true\n"
            "bundles_start_order: 20\n"
            "handlers:\n"
            "  - cfg\n"
            "  - bundle\n",
            encoding="utf-8",
        )
        settings = load_settings(path)
        assert settings.merge_configurations is True
        assert settings.bundles_start_order == 20
        assert settings.handlers == ["cfg", "bundle"]

    def test_json(self, tmp_path: Path):
        path = tmp_path / "cp2fm.json"
        path.write_text('{"strict_validation": true}', encoding="utf-8")
        assert load_settings(path).strict_validation is True

    def test_empty_yaml_gives_defaults(self, tmp_path: Path):
        path = tmp_path / "cp2fm.yml"
        path.write_text("", encoding="utf-8")
        assert load_settings(path) == ConverterSettings()

    def test_overrides_win_and_none_ignored(self, tmp_path: Path):
        path = tmp_path / "cp2fm.yaml"
        path.write_text("bundles_start_order: 20\nmerge_configurations: true\n", encoding="utf-8")
        settings = load_settings(path, bundles_start_order=5, merge_configurations=None)
        assert settings.bundles_start_order == 5
        assert settings.merge_configurations is True

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(SettingsError, match="not found"):
            load_settings(tmp_path / "missing.yaml")

    def test_unsupported_extension(self, tmp_path: Path):
        path = tmp_path / "cp2fm.toml"
        path.write_text("", encoding="utf-8")
        with pytest.raises(SettingsError, match="Unsupported settings extension"):
            load_settings(path)

    def test_directory_path(self, tmp_path: Path):
        path = tmp_path / "cp2fm.yaml"
        path.mkdir()
        with pytest.raises(SettingsError, match="Cannot read"):
            load_settings(path)

    def test_not_utf8(self, tmp_path: Path):
        path = tmp_path / "cp2fm.yaml"
        path.write_bytes(b"bundles_start_order: \xff\xfe\n")
        with pytest.raises(SettingsError, match="Cannot read"):
            load_settings(path)

    def test_unparsable(self, tmp_path: Path):
        path = tmp_path / "cp2fm.json"
        path.write_text("{oops", encoding="utf-8")
        with pytest.raises(SettingsError, match="Cannot parse"):
            load_settings(path)

    def test_not_a_mapping(self, tmp_path: Path):
        path = tmp_path / "cp2fm.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(SettingsError, match="must be a mapping"):
            load_settings(path)

    def test_invalid_values(self, tmp_path: Path):
        path = tmp_path / "cp2fm.yaml"
        path.write_text("handlers: [nope]\n", encoding="utf-8")
        with pytest.raises(SettingsError, match="Invalid settings"):
            load_settings(path)

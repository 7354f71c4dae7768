"""Tests for settings loading and configure()."""

import pytest

from dataknobs_schema import ConfigurationError, LocaleNotFoundError, SchemaSettings, configure, get_settings, s
from dataknobs_schema.messages import MessageCatalog, get_locale, register_locale
from dataknobs_schema.issues import ErrorKind


class TestSchemaSettings:
    """Test building settings from dicts, files and the environment."""

    def test_defaults(self):
        """Test the built-in defaults."""
        settings = SchemaSettings()
        assert settings.locale == "en"
        assert settings.color is False
        assert settings.to_dict() == {"locale": "en", "color": False}

    def test_from_dict_nested_and_flat(self):
        """Test both the namespaced and the flat layout."""
        assert SchemaSettings.from_dict({"dataknobs_schema": {"color": True}}).color is True
        assert SchemaSettings.from_dict({"locale": "fr", "other": 1}).locale == "fr"

    def test_from_dict_rejects_non_mapping(self):
        """Test that a scalar settings section is rejected."""
        with pytest.raises(ConfigurationError):
            SchemaSettings.from_dict({"dataknobs_schema": "yes"})

    def test_from_file(self, tmp_path):
        """Test loading a YAML settings file."""
        path = tmp_path / "settings.yaml"
        path.write_text("dataknobs_schema:\n  locale: de\n  color: 'on'\n")
        settings = SchemaSettings.from_file(path)
        assert settings == SchemaSettings(locale="de", color=True)

    def test_empty_file(self, tmp_path):
        """Test that an empty file yields defaults."""
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert SchemaSettings.from_file(path) == SchemaSettings()

    def test_bad_yaml(self, tmp_path):
        """Test that unparseable YAML raises ConfigurationError with the cause."""
        path = tmp_path / "bad.yaml"
        path.write_text("locale: [unclosed\n")
        with pytest.raises(ConfigurationError) as exc_info:
            SchemaSettings.from_file(path)
        assert exc_info.value.context["path"] == str(path)
        assert exc_info.value.__cause__ is not None

    def test_missing_file(self, tmp_path):
        """Test that an unreadable file raises ConfigurationError."""
        with pytest.raises(ConfigurationError):
            SchemaSettings.from_file(tmp_path / "absent.yaml")

    def test_non_mapping_file(self, tmp_path):
        """Test that a YAML list is rejected."""
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigurationError):
            SchemaSettings.from_file(path)

    def test_environment_overrides(self, tmp_path):
        """Test that environment variables win over the file."""
        path = tmp_path / "settings.yaml"
        path.write_text("locale: de\ncolor: true\n")
        environ = {"DATAKNOBS_SCHEMA_LOCALE": "fr", "DATAKNOBS_SCHEMA_COLOR": "0"}
        settings = SchemaSettings.load(path, environ=environ)
        assert settings == SchemaSettings(locale="fr", color=False)

    def test_os_environ(self, monkeypatch):
        """Test that os.environ is read when no mapping is given."""
        monkeypatch.setenv("DATAKNOBS_SCHEMA_COLOR", "yes")
        assert SchemaSettings.load().color is True


class TestConfigure:
    """Test applying settings process-wide."""

    def test_configure_locale(self):
        """Test that configure activates the locale."""
        register_locale("terse", MessageCatalog({ErrorKind.INVALID_TYPE: "bad type"}, name="terse"))
        configure(SchemaSettings(locale="terse"))
        assert get_locale() == "terse"
        assert get_settings().locale == "terse"
        assert s.string().safe_parse(1).error.messages == ["bad type"]

    def test_configure_overrides(self):
        """Test keyword overrides on top of explicit settings."""
        settings = configure(SchemaSettings(), color=True)
        assert settings.color is True
        assert get_settings().color is True

    def test_color_default_used_by_prettify(self):
        """Test that prettify follows the configured color default."""
        error = s.string().safe_parse(1).error
        configure(SchemaSettings(), color=True)
        assert "\x1b[" in error.prettify()
        configure(SchemaSettings(), color=False)
        assert "\x1b[" not in error.prettify()

    def test_unknown_locale_not_applied(self):
        """Test that a bad locale leaves the current settings in place."""
        before = get_settings()
        with pytest.raises(LocaleNotFoundError):
            configure(SchemaSettings(locale="nowhere"))
        assert get_settings() is before

    def test_configure_from_environment(self, monkeypatch):
        """Test that configure() without arguments loads from the environment."""
        monkeypatch.setenv("DATAKNOBS_SCHEMA_COLOR", "true")
        monkeypatch.delenv("DATAKNOBS_SCHEMA_LOCALE", raising=False)
        assert configure().color is True

"""Unit tests for configuration loading."""

from pathlib import Path

import pytest

from tickettrack import config as config_module
from tickettrack.config import ConfigError, TrackerConfig, load_config


@pytest.mark.unit
class TestTrackerConfig:
    """Tests for TrackerConfig."""

    def test_defaults(self) -> None:
        config = TrackerConfig()

        assert config.base_url == "https://app.asana.com/api/1.0"
        assert config.tick_interval == 1.0
        assert config.section_match == "in progress"
        assert config.min_token_length == 20
        assert config.reauthenticate_on_expiry is False

    def test_from_dict_coerces(self) -> None:
        config = TrackerConfig.from_dict(
            {"tick_interval": "0.5", "port": "9000", "reauthenticate_on_expiry": "yes"}
        )

        assert config.tick_interval == 0.5
        assert config.port == 9000
        assert config.reauthenticate_on_expiry is True

    def test_unknown_keys_go_to_extra(self) -> None:
        config = TrackerConfig.from_dict({"theme": "dark"})

        assert config.extra == {"theme": "dark"}

    def test_invalid_value(self) -> None:
        with pytest.raises(ConfigError, match="port"):
            TrackerConfig.from_dict({"port": "not-a-port"})

    def test_env_overrides(self) -> None:
        config = TrackerConfig().apply_env(
            {
                "TICKETTRACK_SECTION_MATCH": "doing",
                "TICKETTRACK_CHECKPOINT_TICKS": "10",
                "TICKETTRACK_REAUTHENTICATE_ON_EXPIRY": "false",
                "UNRELATED": "1",
            }
        )

        assert config.section_match == "doing"
        assert config.checkpoint_ticks == 10
        assert config.reauthenticate_on_expiry is False

    @pytest.mark.parametrize(("raw", "expected"), [("Yes", True), ("on", True), ("0", False)])
    def test_env_boolean_words(self, raw: str, expected: bool) -> None:
        config = TrackerConfig().apply_env({"TICKETTRACK_REAUTHENTICATE_ON_EXPIRY": raw})

        assert config.reauthenticate_on_expiry is expected

    def test_env_unrecognised_boolean(self) -> None:
        with pytest.raises(ConfigError, match="reauthenticate_on_expiry"):
            TrackerConfig().apply_env({"TICKETTRACK_REAUTHENTICATE_ON_EXPIRY": "maybe"})


@pytest.mark.unit
class TestLoadConfig:
    """Tests for load_config."""

    def test_missing_default_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """A missing default file yields defaults."""
        monkeypatch.setattr(config_module, "DEFAULT_CONFIG_PATH", tmp_path / "config.yaml")

        assert load_config(environ={}) == TrackerConfig()

    def test_missing_explicit_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "missing.yaml", environ={})

    def test_loads_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("db_path: /tmp/tt.db\ntick_interval: 2\nsection_match: Doing\n")

        config = load_config(path, environ={})

        assert config.db_path == "/tmp/tt.db"
        assert config.tick_interval == 2.0
        assert config.section_match == "Doing"

    def test_env_wins_over_file(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("port: 9000\n")

        config = load_config(path, environ={"TICKETTRACK_PORT": "9100"})

        assert config.port == 9100

    def test_config_path_from_env(self, tmp_path: Path) -> None:
        path = tmp_path / "other.yaml"
        path.write_text("host: 0.0.0.0\n")

        config = load_config(environ={"TICKETTRACK_CONFIG": str(path)})

        assert config.host == "0.0.0.0"

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("")

        assert load_config(path, environ={}).port == 8765

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("port: [unclosed\n")

        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(path, environ={})

    def test_not_a_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("- one\n- two\n")

        with pytest.raises(ConfigError, match="mapping"):
            load_config(path, environ={})

import pytest
import yaml

from utils.config_loader import _redact_config, load_config


def test_load_config_reads_mapping(tmp_path):
    path = tmp_path / "validator.yaml"
    path.write_text("settings:\n  log_level: DEBUG\n")

    assert load_config(str(path)) == {"settings": {"log_level": "DEBUG"}}


def test_load_config_empty_file(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")

    assert load_config(str(path)) == {}


def test_load_config_errors(tmp_path):
    broken = tmp_path / "broken.yaml"
    broken.write_text("settings: [unclosed\n")
    listing = tmp_path / "list.yaml"
    listing.write_text("- a\n- b\n")

    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "missing.yaml"))
    with pytest.raises(yaml.YAMLError):
        load_config(str(broken))
    with pytest.raises(ValueError):
        load_config(str(listing))


def test_redact_config_hides_secrets():
    cfg = {
        "api": {"api_key": "abc", "port": 8000},
        "sources": [{"name": "scope", "token": "t"}],
    }

    redacted = _redact_config(cfg)

    assert redacted["api"] == {"api_key": "***REDACTED***", "port": 8000}
    assert redacted["sources"][0] == {"name": "scope", "token": "***REDACTED***"}

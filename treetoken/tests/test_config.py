import json
import os

import pytest

from treetoken.config import LoggingSection, TokenConfig, TokenSection
from treetoken.models import DEFAULT_MAX_SUPPLY, NULL_ADDRESS


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for key in list(os.environ):
        if key.startswith("TREETOKEN_"):
            monkeypatch.delenv(key, raising=False)


def test_defaults_match_reference_constants():
    config = TokenConfig.load()
    assert config.token.max_supply == DEFAULT_MAX_SUPPLY == 10**16
    assert config.token.minting_decay_rate == 5_000_000
    assert config.token.minting_period == 1440
    assert config.token.null_address == NULL_ADDRESS
    assert config.token.legacy_mint_block is None
    assert config.logging.level == "INFO"


def test_json_file(tmp_path):
    path = tmp_path / "token.json"
    path.write_text(json.dumps({"token": {"max_supply": 1000, "minting_period": 7}}), encoding="utf-8")
    config = TokenConfig.load(path)
    assert config.token.max_supply == 1000
    assert config.token.minting_period == 7
    assert config.token.minting_decay_rate == 5_000_000


def test_toml_file(tmp_path):
    path = tmp_path / "token.toml"
    path.write_text(
        '[token]\nminting_decay_rate = 25\nlegacy_mint_block = 1000\n\n[logging]\nformat = "json"\n',
        encoding="utf-8",
    )
    config = TokenConfig.load(path)
    assert config.token.minting_decay_rate == 25
    assert config.token.legacy_mint_block == 1000
    assert config.logging.format == "json"


def test_yaml_file(tmp_path):
    path = tmp_path / "token.yaml"
    path.write_text("token:\n  max_supply: 42\nlogging:\n  level: debug\n", encoding="utf-8")
    config = TokenConfig.load(path)
    assert config.token.max_supply == 42
    assert config.logging.level == "DEBUG"


def test_yaml_must_be_mapping(tmp_path):
    path = tmp_path / "token.yml"
    path.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ValueError):
        TokenConfig.load(path)


def test_missing_file_falls_back_to_defaults(tmp_path):
    config = TokenConfig.load(tmp_path / "absent.json")
    assert config.token.max_supply == DEFAULT_MAX_SUPPLY


def test_env_overrides_file(tmp_path, monkeypatch):
    path = tmp_path / "token.json"
    path.write_text(json.dumps({"token": {"minting_period": 7}}), encoding="utf-8")
    monkeypatch.setenv("TREETOKEN_TOKEN_MINTING_PERIOD", "720")
    monkeypatch.setenv("TREETOKEN_TOKEN_NULL_ADDRESS", "SPNULL")
    monkeypatch.setenv("TREETOKEN_TOKEN_LEGACY_MINT_BLOCK", "none")
    config = TokenConfig.load(path)
    assert config.token.minting_period == 720
    assert config.token.null_address == "SPNULL"
    assert config.token.legacy_mint_block is None


def test_unknown_keys_ignored(monkeypatch, caplog):
    monkeypatch.setenv("TREETOKEN_TOKEN_COLOR", "green")
    monkeypatch.setenv("TREETOKEN_LOG_LEVEL", "DEBUG")
    config = TokenConfig.load()
    assert not hasattr(config.token, "color")
    assert "color" in caplog.text


@pytest.mark.parametrize(
    "section, kwargs",
    [
        (TokenSection, {"max_supply": 0}),
        (TokenSection, {"minting_period": -1}),
        (TokenSection, {"minting_decay_rate": -5}),
        (TokenSection, {"legacy_mint_block": -1}),
        (LoggingSection, {"level": "LOUD"}),
        (LoggingSection, {"format": "xml"}),
    ],
)
def test_validation(section, kwargs):
    with pytest.raises(ValueError):
        section(**kwargs)


def test_to_parameters_and_options():
    config = TokenConfig(token=TokenSection(max_supply=9), logging=LoggingSection(format="json", redact=False))
    assert config.token.to_parameters().max_supply == 9
    options = config.logging.to_options()
    assert options.format == "json"
    assert options.redact is False
    assert json.loads(config.to_json())["token"]["max_supply"] == 9


def test_numeric_null_address_from_env_stays_string(monkeypatch):
    monkeypatch.setenv("TREETOKEN_TOKEN_NULL_ADDRESS", "0")
    config = TokenConfig.load()
    assert config.token.null_address == "0"
    assert config.token.to_parameters().null_address == "0"


def test_log_env_prefix_feeds_logging_section(tmp_path, monkeypatch):
    path = tmp_path / "token.yaml"
    path.write_text("logging:\n  level: warning\n  format: json\n", encoding="utf-8")
    monkeypatch.setenv("TREETOKEN_LOG_LEVEL", "debug")
    monkeypatch.setenv("TREETOKEN_LOGGING_REDACT", "0")
    config = TokenConfig.load(path)
    assert config.logging.level == "DEBUG"
    assert config.logging.format == "json"
    assert config.logging.redact is False

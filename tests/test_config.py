"""Configuration loading and validation."""

import json

import pytest
import yaml
from pydantic import ValidationError

from config.settings import AppConfig, TournamentConfig, get_template_config


def write_config(path, data: dict) -> None:
    path.write_text(json.dumps(data), encoding="utf-8")


def test_defaults() -> None:
    config = AppConfig()

    assert config.tournament.valid_sizes == [4, 8, 16, 32, 64]
    assert config.tournament.elimination_fraction == 0.25
    assert config.tournament.judges_per_round == 3
    assert config.tournament.max_cascade_depth == 16
    assert config.debate_service.base_url is None
    assert config.system.port == 8000


def test_load_from_file(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("DEBATE_SERVICE_API_KEY", raising=False)
    config_path = tmp_path / "tournament_config.json"
    write_config(config_path, {
        "tournament": {"valid_sizes": [4, 8], "auto_start_when_full": True},
        "debate_service": {"base_url": "http://debates.local", "api_key": "secret"},
        "system": {"port": 9100, "log_level": "DEBUG"},
    })

    config = AppConfig.load_from_file(config_path)

    assert config.tournament.valid_sizes == [4, 8]
    assert config.tournament.auto_start_when_full is True
    assert config.debate_service.api_key == "secret"
    assert config.judge_pool.base_url is None
    assert config.system.log_level == "DEBUG"


def test_missing_sections_and_files(tmp_path) -> None:
    config_path = tmp_path / "tournament_config.json"
    write_config(config_path, {"tournament": {}})

    with pytest.raises(ValueError, match="system"):
        AppConfig.load_from_file(config_path)

    with pytest.raises(FileNotFoundError):
        AppConfig.load_from_file(tmp_path / "missing.json")


def test_api_keys_from_environment(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DEBATE_SERVICE_API_KEY", "from-env")
    monkeypatch.setenv("JUDGE_POOL_API_KEY", "judge-env")
    config_path = tmp_path / "tournament_config.json"
    write_config(config_path, {
        "tournament": {},
        "judge_pool": {"api_key": "from-file"},
        "system": {},
    })

    config = AppConfig.load_from_file(config_path)

    assert config.debate_service.api_key == "from-env"
    assert config.judge_pool.api_key == "from-file"


def test_save_to_file_writes_yaml(tmp_path) -> None:
    config_path = tmp_path / "out" / "config.yaml"

    get_template_config().save_to_file(config_path)

    saved = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    assert saved["tournament"]["elimination_fraction"] == 0.25
    assert saved["system"]["port"] == 8000


@pytest.mark.parametrize("fraction", [0, 1, 1.5, -0.1])
def test_elimination_fraction_must_be_a_proper_fraction(fraction: float) -> None:
    with pytest.raises(ValidationError):
        TournamentConfig(elimination_fraction=fraction)


def test_valid_sizes_must_allow_a_match() -> None:
    with pytest.raises(ValidationError):
        TournamentConfig(valid_sizes=[1, 4])

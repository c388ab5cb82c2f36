from __future__ import annotations

import json
from pathlib import Path

import pytest

from paper_gen.config import load_config
from paper_gen.config.loader import merge_dicts


def test_defaults_without_a_config_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("PAPER_GEN_CONFIG_OVERRIDES", raising=False)

    config = load_config()

    assert config.uploads.max_bytes == 15 * 1024 * 1024
    assert config.delivery.proxy_paths == ["/.netlify/functions/proxy", "/api/proxy", "/proxy"]
    assert config.paths.settings_file == Path("data/settings.json")


def test_yaml_file_is_read(tmp_path, monkeypatch):
    monkeypatch.delenv("PAPER_GEN_CONFIG_OVERRIDES", raising=False)
    path = tmp_path / "paper.yaml"
    path.write_text(
        "upstream:\n  url: https://gen.example/api\n"
        "relay:\n  port: 9090\n"
        "logging:\n  level: DEBUG\n  json: true\n",
        encoding="utf-8",
    )

    config = load_config(path)

    assert config.upstream.url == "https://gen.example/api"
    assert config.relay.port == 9090
    assert config.logging.json_output is True


def test_env_overrides_are_deep_merged(tmp_path, monkeypatch):
    path = tmp_path / "paper.yaml"
    path.write_text("delivery:\n  base_url: http://a.test\n  include_external: false\n", encoding="utf-8")
    monkeypatch.setenv("PAPER_GEN_CONFIG_OVERRIDES", json.dumps({"delivery": {"base_url": "http://b.test"}}))

    config = load_config(path)

    assert config.delivery.base_url == "http://b.test"
    assert config.delivery.include_external is False


def test_bad_overrides_json_is_reported(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("PAPER_GEN_CONFIG_OVERRIDES", "{nope")
    with pytest.raises(ValueError, match="PAPER_GEN_CONFIG_OVERRIDES"):
        load_config()


def test_invalid_values_are_rejected(tmp_path, monkeypatch):
    monkeypatch.delenv("PAPER_GEN_CONFIG_OVERRIDES", raising=False)
    path = tmp_path / "paper.yaml"
    path.write_text("delivery:\n  proxy_paths: ['no-slash']\n", encoding="utf-8")
    with pytest.raises(ValueError, match="Invalid configuration"):
        load_config(path)


def test_explicit_path_must_exist(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.yaml")


def test_merge_dicts_keeps_untouched_branches():
    merged = merge_dicts({"a": {"x": 1, "y": 2}, "b": 1}, {"a": {"y": 3}})
    assert merged == {"a": {"x": 1, "y": 3}, "b": 1}


def test_log_level_is_normalised_and_checked(tmp_path, monkeypatch):
    monkeypatch.delenv("PAPER_GEN_CONFIG_OVERRIDES", raising=False)
    path = tmp_path / "paper.yaml"
    path.write_text("logging:\n  level: debug\n", encoding="utf-8")
    assert load_config(path).logging.level == "DEBUG"

    path.write_text("logging:\n  level: loud\n", encoding="utf-8")
    with pytest.raises(ValueError, match="Invalid configuration"):
        load_config(path)

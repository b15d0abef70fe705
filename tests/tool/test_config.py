from __future__ import annotations

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from domainwho_lookup.config import get_config_file, load_options
from domainwho_lookup.models import DEFAULT_TIMEOUT_MS, LookupOptions


def _write_config(monkeypatch, tmp_path: Path, content: str) -> Path:
    config_path = tmp_path / "config.json"
    config_path.write_text(content)
    monkeypatch.setenv("DOMAINWHO_CONFIG", str(config_path))
    return config_path


def test_defaults_without_file_or_environment() -> None:
    options = load_options()
    assert options.timeout_ms == DEFAULT_TIMEOUT_MS
    assert options.api_key() is None
    assert options.rdap_fallback_base is None


def test_environment_overrides_config_file(tmp_path: Path, monkeypatch) -> None:
    _write_config(monkeypatch, tmp_path, json.dumps({"timeout_ms": 9000, "rdap_fallback_base": "https://file.example/"}))
    monkeypatch.setenv("DOMAINWHO_TIMEOUT_MS", "12000")
    monkeypatch.setenv("DOMAINWHO_AGGREGATOR_API_KEY", "from-env")

    options = load_options()

    assert options.timeout_ms == 12000
    assert options.rdap_fallback_base == "https://file.example/"
    assert options.api_key() == "from-env"


def test_explicit_overrides_win_and_none_is_ignored(monkeypatch) -> None:
    monkeypatch.setenv("DOMAINWHO_ENABLE_AGGREGATOR", "true")
    options = load_options(enable_aggregator=False, timeout_ms=None)
    assert options.enable_aggregator is False
    assert options.timeout_ms == DEFAULT_TIMEOUT_MS


def test_empty_environment_values_are_ignored(tmp_path: Path, monkeypatch) -> None:
    _write_config(monkeypatch, tmp_path, json.dumps({"timeout_ms": 9000}))
    monkeypatch.setenv("DOMAINWHO_TIMEOUT_MS", "")
    assert load_options().timeout_ms == 9000


def test_config_file_is_found_through_environment(tmp_path: Path, monkeypatch) -> None:
    config_path = _write_config(monkeypatch, tmp_path, json.dumps({"rdap_proxy_endpoint": "https://proxy.example/{domain}"}))

    assert get_config_file({"DOMAINWHO_CONFIG": str(config_path)}) == config_path
    assert load_options().rdap_proxy_endpoint == "https://proxy.example/{domain}"


def test_plain_construction_reads_the_same_sources(monkeypatch) -> None:
    monkeypatch.setenv("DOMAINWHO_RDAP_FALLBACK_BASE", "https://rdap.alt.example/")
    assert LookupOptions().rdap_fallback_base == "https://rdap.alt.example/"


def test_xdg_config_home_is_used(tmp_path: Path) -> None:
    assert get_config_file({"XDG_CONFIG_HOME": str(tmp_path)}) == tmp_path / "domainwho" / "config.json"


@pytest.mark.parametrize("content", ["{not json", "[1, 2]"])
def test_unreadable_config_file_is_ignored(tmp_path: Path, monkeypatch, content: str) -> None:
    _write_config(monkeypatch, tmp_path, content)
    assert load_options().timeout_ms == DEFAULT_TIMEOUT_MS


def test_unknown_config_file_keys_are_rejected(tmp_path: Path, monkeypatch) -> None:
    _write_config(monkeypatch, tmp_path, json.dumps({"timeout": 9000}))
    with pytest.raises(ValidationError):
        load_options()


def test_invalid_values_raise_validation_error(monkeypatch) -> None:
    monkeypatch.setenv("DOMAINWHO_TIMEOUT_MS", "5")
    with pytest.raises(ValidationError):
        load_options()

    monkeypatch.delenv("DOMAINWHO_TIMEOUT_MS")
    monkeypatch.setenv("DOMAINWHO_RDAP_PROXY_ENDPOINT", "https://proxy.example/")
    with pytest.raises(ValidationError):
        load_options()


def test_api_key_is_not_exposed_in_repr(monkeypatch) -> None:
    monkeypatch.setenv("DOMAINWHO_AGGREGATOR_API_KEY", "hunter2")
    options = load_options()
    assert "hunter2" not in repr(options)
    assert "hunter2" not in options.model_dump_json()

from __future__ import annotations

import dataclasses

import pytest

from greeter.domain.config import GreeterConfig, SourceInfo


def make_config() -> GreeterConfig:
    sources = {
        "verbose": SourceInfo(layer="env", key="verbose"),
        "prefix": SourceInfo(layer="flags", key="prefix"),
        "listen": SourceInfo(layer="defaults", key="listen"),
        "version": SourceInfo(layer="defaults", key="version"),
    }
    return GreeterConfig(verbose=True, prefix="Howdy", listen="127.0.0.1:9000", version=False, sources=sources)


def test_defaults() -> None:
    config = GreeterConfig()
    assert (config.verbose, config.prefix, config.listen, config.version) == (False, "Hello", "0.0.0.0:8080", False)


def test_config_is_frozen() -> None:
    config = make_config()
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.prefix = "Changed"  # type: ignore[misc]


def test_sources_are_read_only() -> None:
    config = make_config()
    with pytest.raises(TypeError):
        config.sources["prefix"] = SourceInfo(layer="env", key="prefix")  # type: ignore[index]


def test_dump_renders_fixed_order() -> None:
    assert make_config().dump().splitlines() == [
        "VERBOSE=true",
        "LISTEN=127.0.0.1:9000",
        "PREFIX=Howdy",
    ]


def test_greeting_uses_prefix() -> None:
    assert make_config().greeting() == "Howdy World!\n"
    assert GreeterConfig(prefix="").greeting() == " World!\n"


def test_origin_metadata() -> None:
    config = make_config()
    assert config.origin("prefix") == {"layer": "flags", "key": "prefix"}
    assert config.origin("missing") is None


def test_from_mapping_ignores_unknown_keys() -> None:
    config = GreeterConfig.from_mapping({"prefix": "Hi", "extra": 1}, {})
    assert config.prefix == "Hi"
    assert config.as_dict() == {"verbose": False, "prefix": "Hi", "listen": "0.0.0.0:8080", "version": False}


def test_equality_ignores_provenance() -> None:
    assert make_config() == dataclasses.replace(make_config(), sources={})

from __future__ import annotations

from hypothesis import given
from hypothesis import strategies as st

from greeter.application.merge import apply_layer, merge_layers


KEYS = st.sampled_from(["verbose", "prefix", "listen", "version"])
SCALAR = st.one_of(st.booleans(), st.text(max_size=8))
MAPPING = st.dictionaries(KEYS, SCALAR, max_size=4)


def test_precedence_overwrites() -> None:
    layers = [
        ("defaults", {"prefix": "Hello", "verbose": False}),
        ("env", {"prefix": "Env", "verbose": True}),
        ("flags", {"prefix": "Flag"}),
    ]
    merged, meta = merge_layers(layers)
    assert merged == {"prefix": "Flag", "verbose": True}
    assert meta["prefix"]["layer"] == "flags"
    assert meta["verbose"]["layer"] == "env"


def test_empty_layer_changes_nothing() -> None:
    merged, meta = merge_layers([("defaults", {"prefix": "Hello"}), ("env", {})])
    assert merged == {"prefix": "Hello"}
    assert meta["prefix"]["layer"] == "defaults"


def test_merge_is_deterministic() -> None:
    layers = [
        ("defaults", {"listen": "0.0.0.0:8080"}),
        ("env", {"listen": "127.0.0.1:9000"}),
    ]
    assert merge_layers(layers) == merge_layers(layers)


def test_merge_does_not_mutate_layers() -> None:
    defaults = {"prefix": "Hello"}
    merge_layers([("defaults", defaults), ("flags", {"prefix": "Flag"})])
    assert defaults == {"prefix": "Hello"}


@given(MAPPING, MAPPING)
def test_apply_layer_is_idempotent(base, payload) -> None:
    once: dict[str, object] = dict(base)
    once_meta: dict = {}
    apply_layer(once, once_meta, "env", payload)

    twice: dict[str, object] = dict(base)
    twice_meta: dict = {}
    apply_layer(twice, twice_meta, "env", payload)
    apply_layer(twice, twice_meta, "env", payload)

    assert once == twice
    assert once_meta == twice_meta


@given(MAPPING, MAPPING, MAPPING)
def test_last_layer_wins(defaults, env, flags) -> None:
    merged, meta = merge_layers([("defaults", defaults), ("env", env), ("flags", flags)])
    for key in set(defaults) | set(env) | set(flags):
        if key in flags:
            expected, layer = flags[key], "flags"
        elif key in env:
            expected, layer = env[key], "env"
        else:
            expected, layer = defaults[key], "defaults"
        assert merged[key] == expected
        assert meta[key]["layer"] == layer

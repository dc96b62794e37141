from __future__ import annotations

import pytest

from conflux.core.paths import (
    MISSING,
    get_path,
    is_prefix,
    is_valid_key,
    iter_hierarchical,
    set_path,
    split_key,
    unflatten,
)


def test_split_key():
    assert split_key("a.b.c") == ["a", "b", "c"]
    assert split_key("single") == ["single"]
    for bad in ("", "a..b", ".a", "a."):
        with pytest.raises(ValueError):
            split_key(bad)


def test_is_valid_key():
    assert is_valid_key("a.b.c")
    assert is_valid_key("single")
    for bad in ("", "a..b", ".a", "a.", None, 3):
        assert not is_valid_key(bad)


def test_get_path():
    data = {"a": {"b": {"c": 1}}, "flag": False, "n": None}
    assert get_path(data, "a.b.c") == 1
    assert get_path(data, "a.b") == {"c": 1}
    assert get_path(data, "flag") is False
    assert get_path(data, "n") is None
    assert get_path(data, "a.x") is MISSING
    assert get_path(data, "flag.x") is MISSING


def test_missing_is_a_falsy_singleton():
    assert not MISSING
    assert type(MISSING)() is MISSING
    assert repr(MISSING) == "MISSING"


def test_set_path_copies_only_the_spine():
    shared = {"x": 1}
    data = {"a": {"b": 1}, "other": shared}

    result = set_path(data, "a.c", 2)

    assert result == {"a": {"b": 1, "c": 2}, "other": {"x": 1}}
    assert data == {"a": {"b": 1}, "other": {"x": 1}}
    assert result["other"] is shared


def test_set_path_replaces_scalar_intermediates():
    assert set_path({"a": 5}, "a.b.c", 1) == {"a": {"b": {"c": 1}}}


def test_is_prefix():
    assert is_prefix("a", "a.b")
    assert is_prefix("a.b", "a.b.c")
    assert not is_prefix("a", "a")
    assert not is_prefix("a", "ab.c")


def test_iter_hierarchical():
    data = {"a": {"b": 1, "c": {"d": [1, 2]}}, "e": {}, "f": "x"}
    assert dict(iter_hierarchical(data)) == {
        "a.b": 1,
        "a.c.d": [1, 2],
        "e": {},
        "f": "x",
    }


def test_iter_hierarchical_depth_limit():
    data = {"a": {"b": {"c": 1}}}
    assert dict(iter_hierarchical(data, depth=0)) == {"a": {"b": {"c": 1}}}
    assert dict(iter_hierarchical(data, depth=1)) == {"a.b": {"c": 1}}


def test_unflatten():
    assert unflatten({"db.host": "h", "db.port": 1, "name": "x"}) == {
        "db": {"host": "h", "port": 1},
        "name": "x",
    }


def test_unflatten_skips_colliding_keys():
    # "db" sorts before "db.host", so the scalar is kept.
    assert unflatten({"db": "sqlite", "db.host": "h"}) == {"db": "sqlite"}

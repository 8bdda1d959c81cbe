import pytest

from yab.mapkeys import map_keys


@pytest.mark.parametrize(
    "m, want",
    [
        ({}, []),
        ({"b": 2, "c": 3, "a": 1}, ["a", "b", "c"]),
        ({"b": "2", "c": "3", "a": "1"}, ["a", "b", "c"]),
    ],
)
def test_map_keys(m, want):
    assert map_keys(m) == want


class _Empty:
    pass


@pytest.mark.parametrize(
    "value",
    [1, "test", _Empty(), None, {1: "a"}],
)
def test_map_keys_invalid_type(value):
    with pytest.raises(TypeError):
        map_keys(value)
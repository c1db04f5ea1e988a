import pytest

from core.functional import Left, Nothing, Right, Some, maybe


def test_maybe_from_optional():
    assert maybe(None) == Nothing()
    assert maybe(0) == Some(0)
    assert maybe("b1").map(str.upper).get_or_else("") == "B1"
    assert maybe(None).map(str.upper).get_or_else("none") == "none"
    assert maybe(None).is_none()


def test_either_bind_short_circuits():
    calls = []

    def step(x):
        calls.append(x)
        return Right(x + 1)

    assert Right(1).bind(step).map(lambda x: x * 10) == Right(20)
    assert Left({"error": "e"}).bind(step).map(lambda x: x * 10) == Left({"error": "e"})
    assert calls == [1]


def test_either_accessors():
    err = Left("bad")
    assert err.is_left()
    assert err.get_or_else(5) == 5
    assert err.get_error() == "bad"
    assert Right(3).get_or_else(5) == 3
    assert not Right(3).is_left()


def test_right_has_no_error():
    with pytest.raises(ValueError):
        Right(1).get_error()
    assert Right(1) != Left(1)
    assert repr(Left("bad")) == "Left('bad')"
    assert repr(Nothing()) == "Nothing()"

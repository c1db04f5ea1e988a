from typing import Callable, Generic, Optional, TypeVar

T = TypeVar('T')
U = TypeVar('U')
E = TypeVar('E')


class Maybe(Generic[T]):
    """An optional value: ``Some(x)`` or ``Nothing()``."""

    _value = None

    def is_some(self) -> bool:
        raise NotImplementedError

    def is_none(self) -> bool:
        return not self.is_some()

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return Some(f(self._value)) if self.is_some() else self

    def get_or_else(self, default: T) -> T:
        return self._value if self.is_some() else default

    def __eq__(self, other) -> bool:
        return type(other) is type(self) and other._value == self._value

    def __repr__(self) -> str:
        inner = repr(self._value) if self.is_some() else ""
        return f"{type(self).__name__}({inner})"


class Some(Maybe[T]):
    def __init__(self, value: T):
        self._value = value

    def is_some(self) -> bool:
        return True


class Nothing(Maybe[T]):
    def is_some(self) -> bool:
        return False


def maybe(value: Optional[T]) -> Maybe[T]:
    return Nothing() if value is None else Some(value)


class Either(Generic[E, T]):
    """A result that is either an error (``Left``) or a value (``Right``).

    ``map`` and ``bind`` only run on a ``Right``; a ``Left`` passes through
    unchanged, so a chain of checks stops at the first failure.
    """

    def __init__(self, payload):
        self._payload = payload

    def is_right(self) -> bool:
        raise NotImplementedError

    def is_left(self) -> bool:
        return not self.is_right()

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return Right(f(self._payload)) if self.is_right() else self

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return f(self._payload) if self.is_right() else self

    def get_or_else(self, default: T) -> T:
        return self._payload if self.is_right() else default

    def get_error(self) -> E:
        if self.is_right():
            raise ValueError("Cannot get error from Right")
        return self._payload

    def __eq__(self, other) -> bool:
        return type(other) is type(self) and other._payload == self._payload

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._payload!r})"


class Right(Either[E, T]):
    def is_right(self) -> bool:
        return True


class Left(Either[E, T]):
    def is_right(self) -> bool:
        return False

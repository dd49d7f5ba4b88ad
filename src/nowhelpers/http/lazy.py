"""
=============================================================================
LAZY REQUEST PROPERTIES
=============================================================================

`request.cookies`, `request.query` and `request.body` are parsed on first
access, then cached:

    first read                    later reads             assignment
    ──────────                    ───────────             ──────────
    request.body                  request.body            request.body = x
        │                             │                       │
        ▼                             ▼                       ▼
    Lazy.get() ─► getter()        Lazy.get() ─► cache     Lazy.set(x)
                     │                                    (getter never runs)
                     ▼
                  cache value

Each request owns its own cells, so nothing parsed for one request can be
observed by another. A test or handler may assign a value before the
property is ever read; the parser then never runs.

=============================================================================
"""

from typing import Any, Callable, Generic, TypeVar

T = TypeVar("T")

_UNRESOLVED = object()


class Lazy(Generic[T]):
    """
    A settable, once-computed cell.

    get() runs the getter at most once. If the getter raises, the cell
    stays unresolved and the exception reaches the reader.
    """

    __slots__ = ("_getter", "_value")

    def __init__(self, getter: Callable[[], T]):
        self._getter = getter
        self._value: Any = _UNRESOLVED

    @property
    def is_resolved(self) -> bool:
        return self._value is not _UNRESOLVED

    def get(self) -> T:
        if self._value is _UNRESOLVED:
            self._value = self._getter()
            self._getter = None  # drop closure over the request
        return self._value

    def set(self, value: T) -> None:
        self._value = value
        self._getter = None

    def __repr__(self) -> str:
        if self.is_resolved:
            return f"Lazy({self._value!r})"
        return "Lazy(<unresolved>)"


class LazyField:
    """
    Descriptor exposing a per-instance Lazy cell as a plain attribute.

    Instances keep their cells in a `_lazy` dict; install them with
    set_lazy_prop(). Reading a field with no cell installed raises
    AttributeError, like any missing attribute.
    """

    def __set_name__(self, owner, name):
        self.name = name

    def __get__(self, instance, owner=None):
        if instance is None:
            return self
        cell = instance._lazy.get(self.name)
        if cell is None:
            raise AttributeError(
                f"{type(instance).__name__}.{self.name} has not been installed"
            )
        return cell.get()

    def __set__(self, instance, value):
        cell = instance._lazy.get(self.name)
        if cell is None:
            cell = instance._lazy[self.name] = Lazy(None)
        cell.set(value)


def set_lazy_prop(target: Any, name: str, getter: Callable[[], T]) -> Lazy[T]:
    """Install a fresh lazy cell for `name` on `target` and return it."""
    cell = Lazy(getter)
    target._lazy[name] = cell
    return cell

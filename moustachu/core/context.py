# moustachu/core/context.py
"""
The data model templates are rendered against.

A Context wraps one value from the caller's data and tags it as an object,
an array or a scalar. Contexts are built once, before rendering, and are
read-only afterwards; the renderer only ever looks things up.
"""
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterator, List, Mapping, Optional, Sequence


class ContextKind(Enum):
    OBJECT = "object"
    ARRAY = "array"
    SCALAR = "scalar"


class Context:
    """An immutable, tagged view over object / array / scalar data.

    Instances are safe to share between threads: construction copies the
    source data into read-only containers and nothing mutates them later.
    """
    __slots__ = ("_kind", "_fields", "_items", "_value")

    def __init__(self, kind: ContextKind, fields: Optional[Mapping[str, "Context"]] = None,
                 items: Sequence["Context"] = (), value: Any = None):
        object.__setattr__(self, "_kind", kind)
        object.__setattr__(self, "_fields", MappingProxyType(dict(fields or {})))
        object.__setattr__(self, "_items", tuple(items))
        object.__setattr__(self, "_value", value)

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    @classmethod
    def from_data(cls, data: Any) -> "Context":
        """Builds a Context tree from plain Python data.

        Mappings become objects (keys coerced to str), lists and tuples become
        arrays and everything else is a scalar.
        """
        if isinstance(data, Context):
            return data
        if isinstance(data, Mapping):
            return cls(ContextKind.OBJECT, fields={str(k): cls.from_data(v) for k, v in data.items()})
        if isinstance(data, (list, tuple)):
            return cls(ContextKind.ARRAY, items=[cls.from_data(v) for v in data])
        return cls(ContextKind.SCALAR, value=data)

    @property
    def kind(self) -> ContextKind:
        return self._kind

    @property
    def value(self) -> Any:
        # raw scalar value; None for objects and arrays.
        return self._value

    def get(self, key: str) -> Optional["Context"]:
        # keyed lookup; only objects have keys.
        if self._kind is not ContextKind.OBJECT:
            return None
        return self._fields.get(key)

    def keys(self) -> List[str]:
        return list(self._fields.keys())

    def __getitem__(self, index: int) -> "Context":
        if self._kind is not ContextKind.ARRAY:
            raise TypeError(f"cannot index a {self._kind.value} context")
        return self._items[index]

    def __iter__(self) -> Iterator["Context"]:
        return iter(self._items)

    def __len__(self) -> int:
        if self._kind is ContextKind.ARRAY:
            return len(self._items)
        if self._kind is ContextKind.OBJECT:
            return len(self._fields)
        return 0

    def __bool__(self) -> bool:
        if self._kind is ContextKind.OBJECT:
            return True
        if self._kind is ContextKind.ARRAY:
            return len(self._items) > 0
        value = self._value
        if value is None or value is False:
            return False
        if isinstance(value, (int, float)) and value == 0:
            return False
        if isinstance(value, str) and value == "":
            return False
        return True

    def __str__(self) -> str:
        if self._kind is not ContextKind.SCALAR:
            return ""
        value = self._value
        if value is None:
            return ""
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, float):
            return repr(value)
        return str(value)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Context):
            return NotImplemented
        return (self._kind is other._kind and dict(self._fields) == dict(other._fields)
                and self._items == other._items and self._value == other._value)

    def __hash__(self):
        return hash((self._kind, self._items, self._value))

    def __repr__(self) -> str:
        if self._kind is ContextKind.OBJECT:
            return f"Context(object, keys={self.keys()!r})"
        if self._kind is ContextKind.ARRAY:
            return f"Context(array, len={len(self._items)})"
        return f"Context(scalar, {self._value!r})"


def to_string(ctx: Optional[Context]) -> str:
    # absent contexts display as the empty string.
    return "" if ctx is None else str(ctx)


def resolve(stack: Sequence[Context], path: str) -> Optional[Context]:
    """Resolves a tag path against a context stack, innermost frame last.

    "." is the innermost frame itself. A dotted path must resolve in full
    within a single frame; the first frame that does so wins.
    """
    if not stack:
        return None
    if path == ".":
        return stack[-1]

    sub_keys = path.split(".")
    for frame in reversed(stack):
        current: Optional[Context] = frame
        for sub_key in sub_keys:
            current = current.get(sub_key)
            if current is None:
                break
        if current is not None:
            return current
    return None

"""
Read-only mapping used by the immutable value types.
"""

from typing import Any, Dict, NoReturn


class FrozenDict(dict):
    """A ``dict`` that rejects mutation once built. Values must be hashable."""

    def _readonly(self, *args: Any, **kwargs: Any) -> NoReturn:
        raise TypeError(f"{self.__class__.__name__} is read-only")

    __setitem__ = _readonly
    __delitem__ = _readonly
    __ior__ = _readonly
    clear = _readonly
    pop = _readonly
    popitem = _readonly
    setdefault = _readonly
    update = _readonly

    def __hash__(self) -> int:
        return hash(frozenset(self.items()))

    def __reduce__(self):
        return (self.__class__, (dict(self),))

    def __copy__(self) -> "FrozenDict":
        return self

    def __deepcopy__(self, memo: Dict[int, Any]) -> "FrozenDict":
        return self

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({dict.__repr__(self)})"

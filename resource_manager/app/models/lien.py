"""
Lien data models.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, List, Optional, Tuple

from .wire import LienDTO

if TYPE_CHECKING:
    from ..service import ResourceManager


@dataclass(frozen=True)
class LienInfo:
    """Immutable lien metadata.

    ``name`` and ``create_time`` are assigned by the service on creation.
    """
    parent: str
    name: Optional[str] = None
    reason: Optional[str] = None
    origin: Optional[str] = None
    restrictions: Tuple[str, ...] = ()
    create_time: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "restrictions", tuple(self.restrictions or ()))

    @staticmethod
    def new_builder(parent: str) -> "LienInfoBuilder":
        return LienInfoBuilder(parent)

    def to_builder(self) -> "LienInfoBuilder":
        return LienInfoBuilder.from_info(self)

    def to_wire(self) -> LienDTO:
        return LienDTO(
            name=self.name,
            parent=self.parent,
            restrictions=list(self.restrictions) if self.restrictions else None,
            reason=self.reason,
            origin=self.origin,
            create_time=self.create_time,
        )

    @classmethod
    def from_wire(cls, dto: LienDTO) -> "LienInfo":
        builder = cls.new_builder(dto.parent)
        if dto.name is not None:
            builder.set_name(dto.name)
        if dto.restrictions is not None:
            builder.set_restrictions(dto.restrictions)
        if dto.reason is not None:
            builder.set_reason(dto.reason)
        if dto.origin is not None:
            builder.set_origin(dto.origin)
        if dto.create_time is not None:
            builder.set_create_time(dto.create_time)
        return builder.build()


class LienInfoBuilder:
    """Mutable staging object for ``LienInfo``; the parent is mandatory."""

    def __init__(self, parent: str):
        if parent is None:
            raise ValueError("A lien requires a parent resource")
        self._parent = parent
        self._name: Optional[str] = None
        self._reason: Optional[str] = None
        self._origin: Optional[str] = None
        self._restrictions: List[str] = []
        self._create_time: Optional[str] = None

    @classmethod
    def from_info(cls, info: LienInfo) -> "LienInfoBuilder":
        builder = cls(info.parent)
        builder._name = info.name
        builder._reason = info.reason
        builder._origin = info.origin
        builder._restrictions = list(info.restrictions)
        builder._create_time = info.create_time
        return builder

    def set_parent(self, parent: str) -> "LienInfoBuilder":
        if parent is None:
            raise ValueError("A lien requires a parent resource")
        self._parent = parent
        return self

    def set_name(self, name: Optional[str]) -> "LienInfoBuilder":
        self._name = name
        return self

    def set_reason(self, reason: Optional[str]) -> "LienInfoBuilder":
        self._reason = reason
        return self

    def set_origin(self, origin: Optional[str]) -> "LienInfoBuilder":
        self._origin = origin
        return self

    def set_restrictions(self, restrictions: Iterable[str]) -> "LienInfoBuilder":
        self._restrictions = list(restrictions)
        return self

    def add_restriction(self, restriction: str) -> "LienInfoBuilder":
        if restriction not in self._restrictions:
            self._restrictions.append(restriction)
        return self

    def set_create_time(self, create_time: Optional[str]) -> "LienInfoBuilder":
        self._create_time = create_time
        return self

    def build(self) -> LienInfo:
        return LienInfo(
            parent=self._parent,
            name=self._name,
            reason=self._reason,
            origin=self._origin,
            restrictions=tuple(self._restrictions),
            create_time=self._create_time,
        )


@dataclass(frozen=True)
class Lien:
    """A lien returned by the service; operations take the client explicitly."""
    info: LienInfo

    @property
    def name(self) -> Optional[str]:
        return self.info.name

    @property
    def parent(self) -> str:
        return self.info.parent

    @property
    def reason(self) -> Optional[str]:
        return self.info.reason

    @property
    def origin(self) -> Optional[str]:
        return self.info.origin

    @property
    def restrictions(self) -> Tuple[str, ...]:
        return self.info.restrictions

    @property
    def create_time(self) -> Optional[str]:
        return self.info.create_time

    def reload(self, client: "ResourceManager") -> Optional["Lien"]:
        return client.get_lien(self.name)

    def delete(self, client: "ResourceManager") -> None:
        client.delete_lien(self.name)

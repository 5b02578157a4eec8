"""
Organization policy constraint models.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from .wire import BooleanConstraintDTO, ConstraintDTO, ListConstraintDTO


class ConstraintDefault(str, Enum):
    """Behavior of a constraint when no policy is set."""
    CONSTRAINT_DEFAULT_UNSPECIFIED = "CONSTRAINT_DEFAULT_UNSPECIFIED"
    ALLOW = "ALLOW"
    DENY = "DENY"


@dataclass(frozen=True)
class BooleanConstraint:
    """Constraint enforced or not as a whole."""


@dataclass(frozen=True)
class ListConstraint:
    """Constraint applied to a list of values."""
    suggested_value: Optional[str] = None
    supports_under: Optional[bool] = None


ConstraintKind = Union[BooleanConstraint, ListConstraint]


@dataclass(frozen=True)
class ConstraintInfo:
    """A constraint that can be applied to a resource."""
    name: Optional[str] = None
    display_name: Optional[str] = None
    description: Optional[str] = None
    constraint_default: Optional[ConstraintDefault] = None
    version: Optional[int] = None
    kind: Optional[ConstraintKind] = None

    def to_wire(self) -> ConstraintDTO:
        dto = ConstraintDTO(
            name=self.name,
            display_name=self.display_name,
            description=self.description,
            constraint_default=self.constraint_default.value if self.constraint_default else None,
            version=self.version,
        )
        if isinstance(self.kind, BooleanConstraint):
            dto.boolean_constraint = BooleanConstraintDTO()
        elif isinstance(self.kind, ListConstraint):
            dto.list_constraint = ListConstraintDTO(
                suggested_value=self.kind.suggested_value,
                supports_under=self.kind.supports_under,
            )
        return dto

    @classmethod
    def from_wire(cls, dto: ConstraintDTO) -> "ConstraintInfo":
        if dto.boolean_constraint is not None and dto.list_constraint is not None:
            raise ValueError(f"Constraint {dto.name!r} is both a boolean and a list constraint")
        kind: Optional[ConstraintKind] = None
        if dto.boolean_constraint is not None:
            kind = BooleanConstraint()
        elif dto.list_constraint is not None:
            kind = ListConstraint(
                suggested_value=dto.list_constraint.suggested_value,
                supports_under=dto.list_constraint.supports_under,
            )
        return cls(
            name=dto.name,
            display_name=dto.display_name,
            description=dto.description,
            constraint_default=(
                ConstraintDefault(dto.constraint_default) if dto.constraint_default is not None else None
            ),
            version=dto.version,
            kind=kind,
        )

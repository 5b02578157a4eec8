"""
Organization policy data models.

An organization policy holds at most one policy type: a boolean policy, a
list policy, or a restore-default marker. The ``policy`` field carries that
choice as a single value so two types can never be set at once.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Tuple, Union

from .wire import BooleanPolicyDTO, ListPolicyDTO, OrgPolicyDTO, RestoreDefaultDTO


class AllValues(str, Enum):
    """Policy state applying to every value of a list constraint."""
    ALL_VALUES_UNSPECIFIED = "ALL_VALUES_UNSPECIFIED"
    ALLOW = "ALLOW"
    DENY = "DENY"


def _as_tuple(values: Optional[Iterable[str]]) -> Optional[Tuple[str, ...]]:
    return tuple(values) if values is not None else None


@dataclass(frozen=True)
class BooleanPolicy:
    """Whether a boolean constraint is enforced."""
    enforced: Optional[bool] = None

    def to_wire(self) -> BooleanPolicyDTO:
        return BooleanPolicyDTO(enforced=self.enforced)

    @classmethod
    def from_wire(cls, dto: BooleanPolicyDTO) -> "BooleanPolicy":
        return cls(enforced=dto.enforced)


@dataclass(frozen=True)
class ListPolicy:
    """Allowed and denied values for a list constraint.

    Values may use the ``under:`` prefix for resource subtrees
    (``projects/``, ``folders/``, ``organizations/``) and ``is:`` for exact
    values. When ``all_values`` is ALLOW or DENY the service requires both
    value lists to be empty.
    """
    all_values: Optional[AllValues] = None
    allowed_values: Optional[Tuple[str, ...]] = None
    denied_values: Optional[Tuple[str, ...]] = None
    inherit_from_parent: Optional[bool] = None
    suggested_value: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "allowed_values", _as_tuple(self.allowed_values))
        object.__setattr__(self, "denied_values", _as_tuple(self.denied_values))
        if isinstance(self.all_values, str) and not isinstance(self.all_values, AllValues):
            object.__setattr__(self, "all_values", AllValues(self.all_values))

    def to_wire(self) -> ListPolicyDTO:
        return ListPolicyDTO(
            all_values=self.all_values.value if self.all_values is not None else None,
            allowed_values=list(self.allowed_values) if self.allowed_values is not None else None,
            denied_values=list(self.denied_values) if self.denied_values is not None else None,
            inherit_from_parent=self.inherit_from_parent,
            suggested_value=self.suggested_value,
        )

    @classmethod
    def from_wire(cls, dto: ListPolicyDTO) -> "ListPolicy":
        return cls(
            all_values=AllValues(dto.all_values) if dto.all_values is not None else None,
            allowed_values=dto.allowed_values,
            denied_values=dto.denied_values,
            inherit_from_parent=dto.inherit_from_parent,
            suggested_value=dto.suggested_value,
        )


@dataclass(frozen=True)
class RestoreDefault:
    """Restores the constraint's default behavior on the resource."""

    def to_wire(self) -> RestoreDefaultDTO:
        return RestoreDefaultDTO()


PolicyType = Union[BooleanPolicy, ListPolicy, RestoreDefault]


@dataclass(frozen=True)
class OrgPolicyInfo:
    """Immutable organization policy metadata."""
    constraint: Optional[str] = None
    policy: Optional[PolicyType] = None
    etag: Optional[str] = None
    update_time: Optional[str] = None
    version: Optional[int] = None

    @property
    def bool_policy(self) -> Optional[BooleanPolicy]:
        return self.policy if isinstance(self.policy, BooleanPolicy) else None

    @property
    def list_policy(self) -> Optional[ListPolicy]:
        return self.policy if isinstance(self.policy, ListPolicy) else None

    @property
    def restore_default(self) -> bool:
        return isinstance(self.policy, RestoreDefault)

    @staticmethod
    def new_builder() -> "OrgPolicyInfoBuilder":
        return OrgPolicyInfoBuilder()

    def to_builder(self) -> "OrgPolicyInfoBuilder":
        return OrgPolicyInfoBuilder.from_info(self)

    def to_wire(self) -> OrgPolicyDTO:
        dto = OrgPolicyDTO(
            constraint=self.constraint,
            etag=self.etag,
            update_time=self.update_time,
            version=self.version,
        )
        if isinstance(self.policy, BooleanPolicy):
            dto.boolean_policy = self.policy.to_wire()
        elif isinstance(self.policy, ListPolicy):
            dto.list_policy = self.policy.to_wire()
        elif isinstance(self.policy, RestoreDefault):
            dto.restore_default = self.policy.to_wire()
        return dto

    @classmethod
    def from_wire(cls, dto: OrgPolicyDTO) -> "OrgPolicyInfo":
        variants = [
            value for value in (dto.boolean_policy, dto.list_policy, dto.restore_default)
            if value is not None
        ]
        if len(variants) > 1:
            raise ValueError(
                f"Organization policy for {dto.constraint!r} carries more than one policy type"
            )
        builder = cls.new_builder()
        if dto.boolean_policy is not None:
            builder.set_bool_policy(BooleanPolicy.from_wire(dto.boolean_policy))
        if dto.list_policy is not None:
            builder.set_list_policy(ListPolicy.from_wire(dto.list_policy))
        if dto.restore_default is not None:
            builder.set_restore_default()
        if dto.constraint is not None:
            builder.set_constraint(dto.constraint)
        if dto.etag is not None:
            builder.set_etag(dto.etag)
        if dto.update_time is not None:
            builder.set_update_time(dto.update_time)
        if dto.version is not None:
            builder.set_version(dto.version)
        return builder.build()


class OrgPolicyInfoBuilder:
    """Mutable staging object for ``OrgPolicyInfo``.

    Setting one policy type replaces whichever type was set before.
    """

    def __init__(self):
        self._constraint: Optional[str] = None
        self._policy: Optional[PolicyType] = None
        self._etag: Optional[str] = None
        self._update_time: Optional[str] = None
        self._version: Optional[int] = None

    @classmethod
    def from_info(cls, info: OrgPolicyInfo) -> "OrgPolicyInfoBuilder":
        builder = cls()
        builder._constraint = info.constraint
        builder._policy = info.policy
        builder._etag = info.etag
        builder._update_time = info.update_time
        builder._version = info.version
        return builder

    def set_constraint(self, constraint: Optional[str]) -> "OrgPolicyInfoBuilder":
        self._constraint = constraint
        return self

    def set_bool_policy(self, policy: Union[BooleanPolicy, bool]) -> "OrgPolicyInfoBuilder":
        self._policy = policy if isinstance(policy, BooleanPolicy) else BooleanPolicy(enforced=policy)
        return self

    def set_list_policy(self, policy: ListPolicy) -> "OrgPolicyInfoBuilder":
        self._policy = policy
        return self

    def set_restore_default(self) -> "OrgPolicyInfoBuilder":
        self._policy = RestoreDefault()
        return self

    def clear_policy(self) -> "OrgPolicyInfoBuilder":
        self._policy = None
        return self

    def set_etag(self, etag: Optional[str]) -> "OrgPolicyInfoBuilder":
        self._etag = etag
        return self

    def set_update_time(self, update_time: Optional[str]) -> "OrgPolicyInfoBuilder":
        self._update_time = update_time
        return self

    def set_version(self, version: Optional[int]) -> "OrgPolicyInfoBuilder":
        self._version = version
        return self

    def build(self) -> OrgPolicyInfo:
        return OrgPolicyInfo(
            constraint=self._constraint,
            policy=self._policy,
            etag=self._etag,
            update_time=self._update_time,
            version=self._version,
        )

"""
IAM policy data models.
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, Mapping, Optional, Set

from .frozen import FrozenDict
from .wire import BindingDTO, PolicyDTO


class Role:
    """Helpers for IAM role names."""

    @staticmethod
    def of(name: str) -> str:
        return name if name.startswith("roles/") else f"roles/{name}"

    @staticmethod
    def owner() -> str:
        return "roles/owner"

    @staticmethod
    def editor() -> str:
        return "roles/editor"

    @staticmethod
    def viewer() -> str:
        return "roles/viewer"


class Identity:
    """Helpers for IAM member identifiers."""

    @staticmethod
    def user(email: str) -> str:
        return f"user:{email}"

    @staticmethod
    def service_account(email: str) -> str:
        return f"serviceAccount:{email}"

    @staticmethod
    def group(email: str) -> str:
        return f"group:{email}"

    @staticmethod
    def domain(domain: str) -> str:
        return f"domain:{domain}"

    @staticmethod
    def all_users() -> str:
        return "allUsers"

    @staticmethod
    def all_authenticated_users() -> str:
        return "allAuthenticatedUsers"


@dataclass(frozen=True)
class Policy:
    """An IAM policy: role bindings plus the etag used for optimistic concurrency.

    A policy written without an etag overwrites whatever the service holds.
    """
    bindings: Mapping[str, FrozenSet[str]] = field(default_factory=dict)
    etag: Optional[str] = None
    version: Optional[int] = None

    def __post_init__(self):
        frozen = {}
        for role, members in (self.bindings or {}).items():
            members = frozenset(members)
            if members:
                frozen[role] = members
        object.__setattr__(self, "bindings", FrozenDict(frozen))

    def __hash__(self) -> int:
        return hash((frozenset(self.bindings.items()), self.etag, self.version))

    @staticmethod
    def new_builder() -> "PolicyBuilder":
        return PolicyBuilder()

    def to_builder(self) -> "PolicyBuilder":
        return PolicyBuilder.from_policy(self)

    def to_wire(self) -> PolicyDTO:
        bindings = [
            BindingDTO(role=role, members=sorted(members))
            for role, members in sorted(self.bindings.items())
            if members
        ]
        return PolicyDTO(bindings=bindings or None, etag=self.etag, version=self.version)

    @classmethod
    def from_wire(cls, dto: PolicyDTO) -> "Policy":
        builder = cls.new_builder()
        for binding in dto.bindings or []:
            if binding.role is None:
                continue
            builder.add_identity(binding.role, *(binding.members or []))
        return builder.set_etag(dto.etag).set_version(dto.version).build()


class PolicyBuilder:
    """Mutable staging object for ``Policy``."""

    def __init__(self):
        self._bindings: Dict[str, Set[str]] = {}
        self._etag: Optional[str] = None
        self._version: Optional[int] = None

    @classmethod
    def from_policy(cls, policy: Policy) -> "PolicyBuilder":
        builder = cls()
        builder.set_bindings(policy.bindings)
        builder._etag = policy.etag
        builder._version = policy.version
        return builder

    def set_bindings(self, bindings: Mapping[str, Iterable[str]]) -> "PolicyBuilder":
        self._bindings = {role: set(members) for role, members in bindings.items()}
        return self

    def add_identity(self, role: str, *identities: str) -> "PolicyBuilder":
        self._bindings.setdefault(role, set()).update(identities)
        return self

    def remove_identity(self, role: str, *identities: str) -> "PolicyBuilder":
        members = self._bindings.get(role)
        if members is not None:
            members.difference_update(identities)
            if not members:
                del self._bindings[role]
        return self

    def remove_role(self, role: str) -> "PolicyBuilder":
        self._bindings.pop(role, None)
        return self

    def set_etag(self, etag: Optional[str]) -> "PolicyBuilder":
        self._etag = etag
        return self

    def set_version(self, version: Optional[int]) -> "PolicyBuilder":
        self._version = version
        return self

    def build(self) -> Policy:
        return Policy(
            bindings={role: frozenset(members) for role, members in self._bindings.items()},
            etag=self._etag,
            version=self._version,
        )


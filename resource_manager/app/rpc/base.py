"""
RPC facade contract for the Resource Manager service.

One method per remote capability, each a single round trip with no retries
and no page aggregation. Failures surface as ``ResourceManagerException``
carrying the service status code.
"""

from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Protocol, Tuple

from ..models.wire import ConstraintDTO, LienDTO, OrgPolicyDTO, PolicyDTO, ProjectDTO


class Option(Enum):
    """Closed set of call options; the value is the wire query parameter."""
    FILTER = "filter"
    FIELDS = "fields"
    PAGE_SIZE = "pageSize"
    PAGE_TOKEN = "pageToken"

    def get(self, options: Mapping["Option", Any]) -> Any:
        return options.get(self)


RpcOptions = Mapping[Option, Any]


def to_query_params(options: RpcOptions) -> Dict[str, Any]:
    """Render options as wire query parameters, skipping unset values."""
    return {option.value: value for option, value in options.items() if value is not None}


class ResourceManagerRpc(Protocol):
    """Transport-facing facade. Every method may raise ``ResourceManagerException``."""

    def create(self, project: ProjectDTO) -> ProjectDTO:
        """Creates a new project."""
        ...

    def delete(self, project_id: str) -> None:
        """Marks the project for deletion."""
        ...

    def get(self, project_id: str, options: RpcOptions) -> Optional[ProjectDTO]:
        """Returns the project, or None if it is missing or not readable by the caller."""
        ...

    def list(self, options: RpcOptions) -> Tuple[Optional[str], List[ProjectDTO]]:
        """Lists one page of projects visible to the caller."""
        ...

    def undelete(self, project_id: str) -> None:
        """Restores a project in the DELETE_REQUESTED state."""
        ...

    def replace(self, project: ProjectDTO) -> ProjectDTO:
        """Replaces the mutable attributes of a project."""
        ...

    def get_policy(self, project_id: str) -> Optional[PolicyDTO]:
        """Returns the project's IAM policy, or None if the project is not visible."""
        ...

    def replace_policy(self, project_id: str, policy: PolicyDTO) -> PolicyDTO:
        """Replaces the project's IAM policy, checking the etag when one is set."""
        ...

    def test_permissions(self, project_id: str, permissions: List[str]) -> List[bool]:
        """One boolean per requested permission, in request order."""
        ...

    def test_org_permissions(self, resource: str, permissions: List[str]) -> Dict[str, bool]:
        """Permission check against an organization resource."""
        ...

    def clear_org_policy(self, resource: str, constraint: str, etag: Optional[str]) -> None:
        """Clears the policy for a constraint on a resource."""
        ...

    def get_effective_org_policy(self, resource: str, constraint: str) -> OrgPolicyDTO:
        """Computed policy across the hierarchy; carries no etag."""
        ...

    def get_org_policy(self, resource: str, constraint: str) -> OrgPolicyDTO:
        """Policy set directly on the resource, with the etag for read-modify-write."""
        ...

    def list_available_org_policy_constraints(
        self, resource: str, options: RpcOptions
    ) -> Tuple[Optional[str], List[ConstraintDTO]]:
        """Lists one page of constraints that can be applied on the resource."""
        ...

    def list_org_policies(
        self, resource: str, options: RpcOptions
    ) -> Tuple[Optional[str], List[OrgPolicyDTO]]:
        """Lists one page of the policies set on the resource."""
        ...

    def set_org_policy(self, resource: str, policy: OrgPolicyDTO) -> OrgPolicyDTO:
        """Creates or updates a policy; no etag means an unconditional write."""
        ...

    def create_lien(self, lien: LienDTO) -> LienDTO:
        """Creates a lien on its parent resource."""
        ...

    def get_lien(self, name: str) -> Optional[LienDTO]:
        """Returns the lien, or None if it does not exist."""
        ...

    def list_liens(self, parent: str, options: RpcOptions) -> Tuple[Optional[str], List[LienDTO]]:
        """Lists one page of liens attached to ``parent``."""
        ...

    def delete_lien(self, name: str) -> None:
        """Deletes a lien."""
        ...

"""
Optimistic concurrency for IAM and organization policy updates.

Reads return the policy together with its etag. Writes present the etag the
caller supplies; the service rejects a stale etag with a 409 conflict, which
is raised to the caller unchanged. A write without an etag overwrites the
stored policy unconditionally. Controllers keep no etag between calls.
"""

from typing import TYPE_CHECKING, Callable, Optional

from shared.errors import ResourceManagerException
from shared.logging import get_logger

from .models import OrgPolicyInfo, Policy

if TYPE_CHECKING:
    from .service import ResourceManager


class IamPolicyController:
    """Read-modify-write access to one project's IAM policy."""

    def __init__(self, client: "ResourceManager", project_id: str):
        self.client = client
        self.project_id = project_id
        self.logger = get_logger("resource_manager.concurrency")

    def read(self) -> Optional[Policy]:
        return self.client.get_policy(self.project_id)

    def write(self, policy: Policy) -> Policy:
        if policy.etag is None:
            self.logger.warning("Writing IAM policy without etag", project_id=self.project_id)
        return self.client.replace_policy(self.project_id, policy)

    def update(self, mutate: Callable[[Policy], Policy]) -> Policy:
        """Apply ``mutate`` to the current policy and write the result once.

        The etag from the read is always the one presented on the write, so a
        concurrent change between the two raises a CONFLICT error.
        """
        current = self.read()
        if current is None:
            raise ResourceManagerException(403, f"Project {self.project_id} not found.")
        updated = mutate(current)
        if updated.etag != current.etag:
            updated = updated.to_builder().set_etag(current.etag).build()
        return self.write(updated)


class OrgPolicyController:
    """Read-modify-write access to one constraint's policy on a resource."""

    def __init__(self, client: "ResourceManager", resource: str, constraint: str):
        self.client = client
        self.resource = resource
        self.constraint = constraint
        self.logger = get_logger("resource_manager.concurrency")

    def _bind(self, org_policy: OrgPolicyInfo) -> OrgPolicyInfo:
        if org_policy.constraint is None:
            return org_policy.to_builder().set_constraint(self.constraint).build()
        if org_policy.constraint != self.constraint:
            raise ValueError(
                f"Policy for {org_policy.constraint!r} does not match controller constraint {self.constraint!r}"
            )
        return org_policy

    def read(self) -> OrgPolicyInfo:
        return self.client.get_org_policy(self.resource, self.constraint)

    def write(self, org_policy: OrgPolicyInfo) -> OrgPolicyInfo:
        org_policy = self._bind(org_policy)
        if org_policy.etag is None:
            self.logger.warning(
                "Writing organization policy without etag",
                resource=self.resource,
                constraint=self.constraint
            )
        return self.client.replace_org_policy(self.resource, org_policy)

    def clear(self, etag: Optional[str] = None) -> None:
        org_policy = OrgPolicyInfo.new_builder().set_constraint(self.constraint).set_etag(etag).build()
        self.client.clear_org_policy(self.resource, org_policy)

    def update(self, mutate: Callable[[OrgPolicyInfo], OrgPolicyInfo]) -> OrgPolicyInfo:
        current = self.read()
        updated = self._bind(mutate(current))
        if updated.etag != current.etag:
            updated = updated.to_builder().set_etag(current.etag).build()
        return self.write(updated)

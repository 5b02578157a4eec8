"""
Resource Manager client facade.

Turns domain values into RPC calls, runs every call through the retry
controller, and converts wire responses back into domain values and pages.
"""

import time
from typing import Any, Callable, Dict, Iterable, List, Optional

from shared.config import ResourceManagerSettings, get_settings
from shared.logging import get_logger
from shared.retry import RetryConfig, RetryController

from .concurrency import IamPolicyController, OrgPolicyController
from .models import ConstraintInfo, Lien, LienInfo, OrgPolicyInfo, Policy, Project, ProjectInfo
from .options import (
    CallOption,
    LienListOption,
    OrgPolicyListOption,
    ProjectGetOption,
    ProjectListOption,
    option_map,
)
from .paging import Page
from .rpc import HttpResourceManagerRpc, Option, ResourceManagerRpc


class ResourceManager:
    """Client for projects, IAM policies, organization policies and liens.

    The client holds no per-call state and may be shared across threads as
    long as the underlying RPC is thread-safe.
    """

    def __init__(self,
                 rpc: ResourceManagerRpc,
                 retry_config: Optional[RetryConfig] = None,
                 sleep: Callable[[float], None] = time.sleep,
                 settings: Optional[ResourceManagerSettings] = None):
        self.rpc = rpc
        self.settings = settings
        if retry_config is None:
            retry_config = RetryConfig.from_settings(settings) if settings is not None else RetryConfig()
        tracing = settings.enable_tracing if settings is not None else True
        self.retry = RetryController(retry_config, sleep=sleep, tracing=tracing)
        self.default_page_size = settings.default_page_size if settings is not None else 0
        self.logger = get_logger("resource_manager.client")

    @classmethod
    def from_settings(cls,
                      settings: Optional[ResourceManagerSettings] = None,
                      **rpc_kwargs: Any) -> "ResourceManager":
        """Build a client talking HTTP to the configured endpoint."""
        settings = settings or get_settings()
        rpc = HttpResourceManagerRpc.from_settings(settings, **rpc_kwargs)
        return cls(rpc, settings=settings)

    def close(self):
        close = getattr(self.rpc, "close", None)
        if close is not None:
            close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def _list_options(self, options: Iterable[CallOption]) -> Dict[Option, Any]:
        mapped = option_map(options)
        if self.default_page_size > 0:
            mapped.setdefault(Option.PAGE_SIZE, self.default_page_size)
        return mapped

    # Projects

    def create(self, project_info: ProjectInfo) -> Project:
        """Create a project; output-only fields on ``project_info`` are not sent.

        A create retried after a lost response can fail with a 409 conflict
        even though the first attempt succeeded.
        """
        dto = self.retry.call("create", self.rpc.create, project_info.to_wire(include_output_only=False))
        self.logger.info("Project created", project_id=dto.project_id)
        return Project(ProjectInfo.from_wire(dto))

    def delete(self, project_id: str) -> None:
        self.retry.call("delete", self.rpc.delete, project_id)
        self.logger.info("Project marked for deletion", project_id=project_id)

    def get(self, project_id: str, *options: ProjectGetOption) -> Optional[Project]:
        """Return the project, or None if it does not exist or is not visible."""
        dto = self.retry.call("get", self.rpc.get, project_id, option_map(options))
        return Project(ProjectInfo.from_wire(dto)) if dto is not None else None

    def list(self, *options: ProjectListOption) -> Page[Project]:
        return Page.fetch(
            lambda opts: self.retry.call("list", self.rpc.list, opts),
            self._list_options(options),
            lambda dto: Project(ProjectInfo.from_wire(dto)),
        )

    def undelete(self, project_id: str) -> None:
        self.retry.call("undelete", self.rpc.undelete, project_id)
        self.logger.info("Project restored", project_id=project_id)

    def replace(self, project_info: ProjectInfo) -> Project:
        dto = self.retry.call("replace", self.rpc.replace, project_info.to_wire(include_output_only=False))
        return Project(ProjectInfo.from_wire(dto))

    # IAM

    def get_policy(self, project_id: str) -> Optional[Policy]:
        dto = self.retry.call("get_policy", self.rpc.get_policy, project_id)
        return Policy.from_wire(dto) if dto is not None else None

    def replace_policy(self, project_id: str, policy: Policy) -> Policy:
        dto = self.retry.call("replace_policy", self.rpc.replace_policy, project_id, policy.to_wire())
        return Policy.from_wire(dto)

    def test_permissions(self, project_id: str, permissions: List[str]) -> List[bool]:
        return self.retry.call("test_permissions", self.rpc.test_permissions, project_id, list(permissions))

    def test_org_permissions(self, resource: str, permissions: List[str]) -> Dict[str, bool]:
        return self.retry.call("test_org_permissions", self.rpc.test_org_permissions, resource, list(permissions))

    def iam_policy_controller(self, project_id: str) -> IamPolicyController:
        return IamPolicyController(self, project_id)

    # Organization policies

    def clear_org_policy(self, resource: str, org_policy: OrgPolicyInfo) -> None:
        """Clear the policy for ``org_policy.constraint``, checking its etag when set."""
        if not org_policy.constraint:
            raise ValueError("An organization policy constraint is required")
        self.retry.call(
            "clear_org_policy", self.rpc.clear_org_policy, resource, org_policy.constraint, org_policy.etag
        )

    def get_effective_org_policy(self, resource: str, constraint: str) -> OrgPolicyInfo:
        dto = self.retry.call("get_effective_org_policy", self.rpc.get_effective_org_policy, resource, constraint)
        return OrgPolicyInfo.from_wire(dto)

    def get_org_policy(self, resource: str, constraint: str) -> OrgPolicyInfo:
        dto = self.retry.call("get_org_policy", self.rpc.get_org_policy, resource, constraint)
        return OrgPolicyInfo.from_wire(dto)

    def list_available_org_policy_constraints(
        self, resource: str, *options: OrgPolicyListOption
    ) -> Page[ConstraintInfo]:
        return Page.fetch(
            lambda opts: self.retry.call(
                "list_available_org_policy_constraints",
                self.rpc.list_available_org_policy_constraints,
                resource,
                opts
            ),
            self._list_options(options),
            ConstraintInfo.from_wire,
        )

    def list_org_policies(self, resource: str, *options: OrgPolicyListOption) -> Page[OrgPolicyInfo]:
        return Page.fetch(
            lambda opts: self.retry.call("list_org_policies", self.rpc.list_org_policies, resource, opts),
            self._list_options(options),
            OrgPolicyInfo.from_wire,
        )

    def replace_org_policy(self, resource: str, org_policy: OrgPolicyInfo) -> OrgPolicyInfo:
        dto = self.retry.call("set_org_policy", self.rpc.set_org_policy, resource, org_policy.to_wire())
        return OrgPolicyInfo.from_wire(dto)

    def org_policy_controller(self, resource: str, constraint: str) -> OrgPolicyController:
        return OrgPolicyController(self, resource, constraint)

    # Liens

    def create_lien(self, lien_info: LienInfo) -> Lien:
        dto = self.retry.call("create_lien", self.rpc.create_lien, lien_info.to_wire())
        self.logger.info("Lien created", name=dto.name, parent=dto.parent)
        return Lien(LienInfo.from_wire(dto))

    def get_lien(self, name: str) -> Optional[Lien]:
        dto = self.retry.call("get_lien", self.rpc.get_lien, name)
        return Lien(LienInfo.from_wire(dto)) if dto is not None else None

    def list_liens(self, parent: str, *options: LienListOption) -> Page[Lien]:
        return Page.fetch(
            lambda opts: self.retry.call("list_liens", self.rpc.list_liens, parent, opts),
            self._list_options(options),
            lambda dto: Lien(LienInfo.from_wire(dto)),
        )

    def delete_lien(self, name: str) -> None:
        self.retry.call("delete_lien", self.rpc.delete_lien, name)
        self.logger.info("Lien deleted", name=name)

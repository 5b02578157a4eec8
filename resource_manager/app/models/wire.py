"""
Wire-format models for the Cloud Resource Manager REST surface.

These mirror the JSON documents exchanged with the service. Field names are
snake_case in Python and camelCase on the wire; absent fields stay ``None``
and are dropped when serialized.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base class for every wire DTO."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_json_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


# Projects

class ResourceIdDTO(WireModel):
    type: Optional[str] = None
    id: Optional[str] = None


class ProjectDTO(WireModel):
    project_id: Optional[str] = None
    name: Optional[str] = None
    labels: Optional[Dict[str, str]] = None
    project_number: Optional[int] = None
    lifecycle_state: Optional[str] = None
    create_time: Optional[str] = None
    parent: Optional[ResourceIdDTO] = None


class ListProjectsResponse(WireModel):
    projects: Optional[List[ProjectDTO]] = None
    next_page_token: Optional[str] = None


# IAM

class BindingDTO(WireModel):
    role: Optional[str] = None
    members: Optional[List[str]] = None


class PolicyDTO(WireModel):
    bindings: Optional[List[BindingDTO]] = None
    etag: Optional[str] = None
    version: Optional[int] = None


class SetIamPolicyRequest(WireModel):
    policy: PolicyDTO


class IamPermissionsRequest(WireModel):
    permissions: List[str]


class IamPermissionsResponse(WireModel):
    permissions: Optional[List[str]] = None


# Organization policies

class BooleanPolicyDTO(WireModel):
    enforced: Optional[bool] = None


class ListPolicyDTO(WireModel):
    all_values: Optional[str] = None
    allowed_values: Optional[List[str]] = None
    denied_values: Optional[List[str]] = None
    inherit_from_parent: Optional[bool] = None
    suggested_value: Optional[str] = None


class RestoreDefaultDTO(WireModel):
    pass


class OrgPolicyDTO(WireModel):
    constraint: Optional[str] = None
    boolean_policy: Optional[BooleanPolicyDTO] = None
    list_policy: Optional[ListPolicyDTO] = None
    restore_default: Optional[RestoreDefaultDTO] = None
    etag: Optional[str] = None
    update_time: Optional[str] = None
    version: Optional[int] = None


class GetOrgPolicyRequest(WireModel):
    constraint: str


class ClearOrgPolicyRequest(WireModel):
    constraint: str
    etag: Optional[str] = None


class SetOrgPolicyRequest(WireModel):
    policy: OrgPolicyDTO


class PagedRequest(WireModel):
    page_size: Optional[int] = None
    page_token: Optional[str] = None


class ListOrgPoliciesResponse(WireModel):
    policies: Optional[List[OrgPolicyDTO]] = None
    next_page_token: Optional[str] = None


class BooleanConstraintDTO(WireModel):
    pass


class ListConstraintDTO(WireModel):
    suggested_value: Optional[str] = None
    supports_under: Optional[bool] = None


class ConstraintDTO(WireModel):
    name: Optional[str] = None
    display_name: Optional[str] = None
    description: Optional[str] = None
    constraint_default: Optional[str] = None
    version: Optional[int] = None
    boolean_constraint: Optional[BooleanConstraintDTO] = None
    list_constraint: Optional[ListConstraintDTO] = None


class ListAvailableOrgPolicyConstraintsResponse(WireModel):
    constraints: Optional[List[ConstraintDTO]] = None
    next_page_token: Optional[str] = None


# Liens

class LienDTO(WireModel):
    name: Optional[str] = None
    parent: Optional[str] = None
    restrictions: Optional[List[str]] = None
    reason: Optional[str] = None
    origin: Optional[str] = None
    create_time: Optional[str] = None


class ListLiensResponse(WireModel):
    liens: Optional[List[LienDTO]] = None
    next_page_token: Optional[str] = None


# Errors

class StatusDTO(WireModel):
    code: Optional[int] = None
    message: Optional[str] = None
    status: Optional[str] = None


class ErrorEnvelope(WireModel):
    error: Optional[StatusDTO] = None

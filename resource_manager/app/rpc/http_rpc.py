"""
HTTP implementation of the Resource Manager RPC facade.
"""

from typing import Any, Dict, List, Mapping, Optional, Tuple

import httpx

from shared.config import DEFAULT_ENDPOINT, ResourceManagerSettings
from shared.errors import ResourceManagerException
from shared.logging import get_logger

from ..models.wire import (
    ClearOrgPolicyRequest,
    ConstraintDTO,
    ErrorEnvelope,
    GetOrgPolicyRequest,
    IamPermissionsRequest,
    IamPermissionsResponse,
    LienDTO,
    ListAvailableOrgPolicyConstraintsResponse,
    ListLiensResponse,
    ListOrgPoliciesResponse,
    ListProjectsResponse,
    OrgPolicyDTO,
    PagedRequest,
    PolicyDTO,
    ProjectDTO,
    SetIamPolicyRequest,
    SetOrgPolicyRequest,
)
from .base import Option, RpcOptions, to_query_params

PROJECTS_VERSION = "v1beta1"
RESOURCES_VERSION = "v1"


def _token(value: Optional[str]) -> Optional[str]:
    return value or None


class HttpResourceManagerRpc:
    """Issues one HTTP request per facade call against the REST surface.

    Credentials are not handled here: pass an authorized ``httpx.Client`` or
    default headers. Transport errors propagate unchanged.
    """

    def __init__(self,
                 endpoint: str = DEFAULT_ENDPOINT,
                 timeout: float = 30.0,
                 client: Optional[httpx.Client] = None,
                 transport: Optional[httpx.BaseTransport] = None,
                 headers: Optional[Mapping[str, str]] = None):
        self.endpoint = endpoint.rstrip("/")
        self.logger = get_logger("resource_manager.rpc")
        self._owns_client = client is None
        self._client = client or httpx.Client(
            timeout=timeout,
            transport=transport,
            headers=dict(headers or {}),
        )

    @classmethod
    def from_settings(cls, settings: ResourceManagerSettings, **kwargs) -> "HttpResourceManagerRpc":
        return cls(endpoint=settings.endpoint, timeout=settings.request_timeout, **kwargs)

    def close(self):
        if self._owns_client:
            self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    # Plumbing

    def _url(self, version: str, path: str) -> str:
        return f"{self.endpoint}/{version}/{path}"

    def _request(self,
                 method: str,
                 url: str,
                 params: Optional[Dict[str, Any]] = None,
                 body: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        response = self._client.request(method, url, params=params or None, json=body)
        if response.is_success:
            self.logger.debug("Resource Manager call succeeded", method=method, url=url,
                              status_code=response.status_code)
            if not response.content:
                return {}
            return response.json()

        error = self._translate(response)
        self.logger.info(
            "Resource Manager call failed",
            method=method,
            url=url,
            status_code=response.status_code,
            error=error.message
        )
        raise error

    @staticmethod
    def _translate(response: httpx.Response) -> ResourceManagerException:
        message = None
        status = None
        try:
            envelope = ErrorEnvelope.model_validate(response.json())
            if envelope.error is not None:
                message = envelope.error.message
                status = envelope.error.status
        except ValueError:
            pass
        if not message:
            message = f"{response.status_code} {response.reason_phrase}".strip()
        return ResourceManagerException(
            response.status_code,
            message,
            details={"status": status, "url": str(response.request.url)}
        )

    def _get_or_none(self, missing_codes: Tuple[int, ...], method: str, url: str,
                     params: Optional[Dict[str, Any]] = None,
                     body: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
        try:
            return self._request(method, url, params=params, body=body)
        except ResourceManagerException as e:
            if e.code in missing_codes:
                return None
            raise

    @staticmethod
    def _paged_body(options: RpcOptions) -> Dict[str, Any]:
        return PagedRequest(
            page_size=Option.PAGE_SIZE.get(options),
            page_token=Option.PAGE_TOKEN.get(options),
        ).to_json_dict()

    # Projects

    def create(self, project: ProjectDTO) -> ProjectDTO:
        data = self._request("POST", self._url(PROJECTS_VERSION, "projects"), body=project.to_json_dict())
        return ProjectDTO.model_validate(data)

    def delete(self, project_id: str) -> None:
        self._request("DELETE", self._url(PROJECTS_VERSION, f"projects/{project_id}"))

    def get(self, project_id: str, options: RpcOptions) -> Optional[ProjectDTO]:
        data = self._get_or_none(
            (403, 404), "GET", self._url(PROJECTS_VERSION, f"projects/{project_id}"),
            params=to_query_params(options)
        )
        return ProjectDTO.model_validate(data) if data is not None else None

    def list(self, options: RpcOptions) -> Tuple[Optional[str], List[ProjectDTO]]:
        data = self._request("GET", self._url(PROJECTS_VERSION, "projects"), params=to_query_params(options))
        response = ListProjectsResponse.model_validate(data)
        return _token(response.next_page_token), response.projects or []

    def undelete(self, project_id: str) -> None:
        self._request("POST", self._url(PROJECTS_VERSION, f"projects/{project_id}:undelete"), body={})

    def replace(self, project: ProjectDTO) -> ProjectDTO:
        data = self._request(
            "PUT", self._url(PROJECTS_VERSION, f"projects/{project.project_id}"), body=project.to_json_dict()
        )
        return ProjectDTO.model_validate(data)

    # IAM

    def get_policy(self, project_id: str) -> Optional[PolicyDTO]:
        data = self._get_or_none(
            (403, 404), "POST", self._url(PROJECTS_VERSION, f"projects/{project_id}:getIamPolicy"), body={}
        )
        return PolicyDTO.model_validate(data) if data is not None else None

    def replace_policy(self, project_id: str, policy: PolicyDTO) -> PolicyDTO:
        data = self._request(
            "POST",
            self._url(PROJECTS_VERSION, f"projects/{project_id}:setIamPolicy"),
            body=SetIamPolicyRequest(policy=policy).to_json_dict()
        )
        return PolicyDTO.model_validate(data)

    def test_permissions(self, project_id: str, permissions: List[str]) -> List[bool]:
        data = self._request(
            "POST",
            self._url(PROJECTS_VERSION, f"projects/{project_id}:testIamPermissions"),
            body=IamPermissionsRequest(permissions=list(permissions)).to_json_dict()
        )
        granted = set(IamPermissionsResponse.model_validate(data).permissions or [])
        return [permission in granted for permission in permissions]

    def test_org_permissions(self, resource: str, permissions: List[str]) -> Dict[str, bool]:
        data = self._request(
            "POST",
            self._url(RESOURCES_VERSION, f"{resource}:testIamPermissions"),
            body=IamPermissionsRequest(permissions=list(permissions)).to_json_dict()
        )
        granted = set(IamPermissionsResponse.model_validate(data).permissions or [])
        return {permission: permission in granted for permission in permissions}

    # Organization policies

    def clear_org_policy(self, resource: str, constraint: str, etag: Optional[str]) -> None:
        self._request(
            "POST",
            self._url(RESOURCES_VERSION, f"{resource}:clearOrgPolicy"),
            body=ClearOrgPolicyRequest(constraint=constraint, etag=etag).to_json_dict()
        )

    def get_effective_org_policy(self, resource: str, constraint: str) -> OrgPolicyDTO:
        data = self._request(
            "POST",
            self._url(RESOURCES_VERSION, f"{resource}:getEffectiveOrgPolicy"),
            body=GetOrgPolicyRequest(constraint=constraint).to_json_dict()
        )
        return OrgPolicyDTO.model_validate(data)

    def get_org_policy(self, resource: str, constraint: str) -> OrgPolicyDTO:
        data = self._request(
            "POST",
            self._url(RESOURCES_VERSION, f"{resource}:getOrgPolicy"),
            body=GetOrgPolicyRequest(constraint=constraint).to_json_dict()
        )
        return OrgPolicyDTO.model_validate(data)

    def list_available_org_policy_constraints(
        self, resource: str, options: RpcOptions
    ) -> Tuple[Optional[str], List[ConstraintDTO]]:
        data = self._request(
            "POST",
            self._url(RESOURCES_VERSION, f"{resource}:listAvailableOrgPolicyConstraints"),
            body=self._paged_body(options)
        )
        response = ListAvailableOrgPolicyConstraintsResponse.model_validate(data)
        return _token(response.next_page_token), response.constraints or []

    def list_org_policies(
        self, resource: str, options: RpcOptions
    ) -> Tuple[Optional[str], List[OrgPolicyDTO]]:
        data = self._request(
            "POST",
            self._url(RESOURCES_VERSION, f"{resource}:listOrgPolicies"),
            body=self._paged_body(options)
        )
        response = ListOrgPoliciesResponse.model_validate(data)
        return _token(response.next_page_token), response.policies or []

    def set_org_policy(self, resource: str, policy: OrgPolicyDTO) -> OrgPolicyDTO:
        data = self._request(
            "POST",
            self._url(RESOURCES_VERSION, f"{resource}:setOrgPolicy"),
            body=SetOrgPolicyRequest(policy=policy).to_json_dict()
        )
        return OrgPolicyDTO.model_validate(data)

    # Liens

    def create_lien(self, lien: LienDTO) -> LienDTO:
        data = self._request("POST", self._url(RESOURCES_VERSION, "liens"), body=lien.to_json_dict())
        return LienDTO.model_validate(data)

    def get_lien(self, name: str) -> Optional[LienDTO]:
        data = self._get_or_none((404,), "GET", self._url(RESOURCES_VERSION, name))
        return LienDTO.model_validate(data) if data is not None else None

    def list_liens(self, parent: str, options: RpcOptions) -> Tuple[Optional[str], List[LienDTO]]:
        params = {"parent": parent, **to_query_params(options)}
        data = self._request("GET", self._url(RESOURCES_VERSION, "liens"), params=params)
        response = ListLiensResponse.model_validate(data)
        return _token(response.next_page_token), response.liens or []

    def delete_lien(self, name: str) -> None:
        self._request("DELETE", self._url(RESOURCES_VERSION, name))

"""
In-memory emulator of the Resource Manager REST service.

Requests are answered through ``httpx.MockTransport`` so clients exercise the
real HTTP code path without a network. State lives in memory and is shared by
every client created from the same helper.
"""

import hashlib
import json
import re
import threading
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx

from shared.logging import get_logger
from shared.retry import RetryConfig

from ..models.timestamps import now_rfc3339
from ..models.wire import (
    BooleanConstraintDTO,
    ConstraintDTO,
    ErrorEnvelope,
    LienDTO,
    ListConstraintDTO,
    OrgPolicyDTO,
    PolicyDTO,
    ProjectDTO,
    StatusDTO,
)
from ..rpc.http_rpc import HttpResourceManagerRpc
from ..service import ResourceManager

LOCAL_ENDPOINT = "http://localhost:8080"

_STATUS_NAMES = {
    400: "INVALID_ARGUMENT",
    403: "PERMISSION_DENIED",
    404: "NOT_FOUND",
    409: "ALREADY_EXISTS",
    500: "INTERNAL",
    502: "UNAVAILABLE",
    503: "UNAVAILABLE",
    504: "DEADLINE_EXCEEDED",
}

_PROJECT_ID = re.compile(r"^[a-z][a-z0-9-]*$")
_ORG_RESOURCE = re.compile(r"^(organizations|folders|projects)/[^/]+$")
_LIST_FIELDS = re.compile(r"^projects\(([^)]*)\)")

_PROJECTS = re.compile(r"^/v1beta1/projects$")
_PROJECT = re.compile(r"^/v1beta1/projects/([^/:]+)$")
_PROJECT_ACTION = re.compile(r"^/v1beta1/projects/([^/:]+):(\w+)$")
_LIENS = re.compile(r"^/v1/liens$")
_LIEN = re.compile(r"^/v1/(liens/[^/:]+)$")
_RESOURCE_ACTION = re.compile(r"^/v1/(.+):(\w+)$")


def default_constraints() -> List[ConstraintDTO]:
    """A small catalog of constraints available on every resource."""
    return [
        ConstraintDTO(
            name="constraints/compute.disableSerialPortAccess",
            display_name="Disable VM serial port access",
            constraint_default="ALLOW",
            version=1,
            boolean_constraint=BooleanConstraintDTO(),
        ),
        ConstraintDTO(
            name="constraints/compute.requireOsLogin",
            display_name="Require OS Login",
            constraint_default="ALLOW",
            version=1,
            boolean_constraint=BooleanConstraintDTO(),
        ),
        ConstraintDTO(
            name="constraints/gcp.resourceLocations",
            display_name="Resource Location Restriction",
            constraint_default="ALLOW",
            version=1,
            list_constraint=ListConstraintDTO(supports_under=True),
        ),
        ConstraintDTO(
            name="constraints/iam.allowedPolicyMemberDomains",
            display_name="Domain restricted sharing",
            constraint_default="ALLOW",
            version=1,
            list_constraint=ListConstraintDTO(),
        ),
    ]


class ServiceError(Exception):
    """Error answered by the emulator as a JSON error envelope."""

    def __init__(self, code: int, message: str, status: Optional[str] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status = status or _STATUS_NAMES.get(code, "UNKNOWN")

    def to_response(self) -> httpx.Response:
        return httpx.Response(
            self.code,
            json=ErrorEnvelope(error=StatusDTO(code=self.code, message=self.message, status=self.status)).to_json_dict(),
        )


@dataclass
class RecordedRequest:
    """A request received by the emulator."""
    method: str
    path: str
    params: Dict[str, str]
    body: Optional[Dict[str, Any]]


@dataclass
class OrgPolicyRecord:
    """Generation counter and current policy for one resource/constraint pair."""
    generation: int = 0
    policy: Optional[OrgPolicyDTO] = None


@dataclass
class FailurePlan:
    """Remaining injected failures."""
    remaining: int = 0
    code: int = 500
    message: str = "Internal Error"


class LocalResourceManagerHelper:
    """Emulates projects, IAM policies, organization policies and liens.

    Projects are listed in ascending project id order and the page cursor is
    the id of the first project on the next page. Lien pages use numeric
    offsets. Etags change on every successful write.
    """

    def __init__(self,
                 endpoint: str = LOCAL_ENDPOINT,
                 constraints: Optional[List[ConstraintDTO]] = None):
        self.endpoint = endpoint.rstrip("/")
        self.logger = get_logger("resource_manager.local")
        self._lock = threading.Lock()
        self._constraints = list(constraints) if constraints is not None else default_constraints()
        self._projects: Dict[str, ProjectDTO] = {}
        self._policies: Dict[str, PolicyDTO] = {}
        self._org_policies: Dict[Tuple[str, str], OrgPolicyRecord] = {}
        self._liens: Dict[str, LienDTO] = {}
        self._next_project_number = 100000000000
        self._failures = FailurePlan()
        self.requests: List[RecordedRequest] = []

    # Client wiring

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def create_rpc(self) -> HttpResourceManagerRpc:
        return HttpResourceManagerRpc(endpoint=self.endpoint, transport=self.transport())

    def create_client(self,
                      retry_config: Optional[RetryConfig] = None,
                      sleep: Callable[[float], None] = lambda _: None) -> ResourceManager:
        """Build a ``ResourceManager`` bound to this emulator; retries do not sleep."""
        return ResourceManager(self.create_rpc(), retry_config=retry_config, sleep=sleep)

    # State control

    def fail_next(self, count: int, code: int = 500, message: str = "Internal Error"):
        """Answer the next ``count`` requests with ``code`` before touching any state."""
        with self._lock:
            self._failures = FailurePlan(remaining=count, code=code, message=message)

    def remove_project(self, project_id: str) -> bool:
        """Remove a project outright, bypassing the deletion lifecycle."""
        with self._lock:
            self._policies.pop(project_id, None)
            return self._projects.pop(project_id, None) is not None

    def clear(self):
        with self._lock:
            self._projects.clear()
            self._policies.clear()
            self._org_policies.clear()
            self._liens.clear()
            self._failures = FailurePlan()
            self.requests.clear()

    # Dispatch

    def handle(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        params = dict(request.url.params)
        path = request.url.path
        with self._lock:
            self.requests.append(RecordedRequest(request.method, path, params, body))
            try:
                if self._failures.remaining > 0:
                    self._failures.remaining -= 1
                    raise ServiceError(self._failures.code, self._failures.message)
                payload = self._dispatch(request.method, path, params, body or {})
            except ServiceError as e:
                self.logger.debug("Emulator error", method=request.method, path=path, code=e.code)
                return e.to_response()
        return httpx.Response(200, json=payload)

    def _dispatch(self, method: str, path: str, params: Dict[str, str], body: Dict[str, Any]) -> Dict[str, Any]:
        match = _PROJECTS.match(path)
        if match:
            if method == "POST":
                return self._create_project(body)
            if method == "GET":
                return self._list_projects(params)

        match = _PROJECT.match(path)
        if match:
            project_id = match.group(1)
            if method == "GET":
                return self._get_project(project_id, params)
            if method == "PUT":
                return self._replace_project(project_id, body)
            if method == "DELETE":
                return self._delete_project(project_id)

        match = _PROJECT_ACTION.match(path)
        if match and method == "POST":
            project_id, action = match.groups()
            handlers = {
                "undelete": lambda: self._undelete_project(project_id),
                "getIamPolicy": lambda: self._get_iam_policy(project_id),
                "setIamPolicy": lambda: self._set_iam_policy(project_id, body),
                "testIamPermissions": lambda: self._test_project_permissions(project_id, body),
            }
            if action in handlers:
                return handlers[action]()

        match = _LIENS.match(path)
        if match:
            if method == "POST":
                return self._create_lien(body)
            if method == "GET":
                return self._list_liens(params)

        match = _LIEN.match(path)
        if match:
            if method == "GET":
                return self._get_lien(match.group(1))
            if method == "DELETE":
                return self._delete_lien(match.group(1))

        match = _RESOURCE_ACTION.match(path)
        if match and method == "POST":
            resource, action = match.groups()
            self._check_resource(resource)
            handlers = {
                "getOrgPolicy": lambda: self._get_org_policy(resource, body),
                "getEffectiveOrgPolicy": lambda: self._get_effective_org_policy(resource, body),
                "setOrgPolicy": lambda: self._set_org_policy(resource, body),
                "clearOrgPolicy": lambda: self._clear_org_policy(resource, body),
                "listOrgPolicies": lambda: self._list_org_policies(resource, body),
                "listAvailableOrgPolicyConstraints": lambda: self._list_constraints(body),
                "testIamPermissions": lambda: {"permissions": list(body.get("permissions") or [])},
            }
            if action in handlers:
                return handlers[action]()

        raise ServiceError(404, f"Method {method} {path} not found.")

    # Projects

    def _create_project(self, body: Dict[str, Any]) -> Dict[str, Any]:
        project = ProjectDTO.model_validate(body)
        project_id = project.project_id
        if not project_id or not _PROJECT_ID.match(project_id):
            raise ServiceError(400, f"Project id '{project_id}' is invalid.")
        if project_id in self._projects:
            raise ServiceError(409, f"A project with the same project ID ({project_id}) already exists.")
        project.project_number = self._next_project_number
        self._next_project_number += 1
        project.lifecycle_state = "ACTIVE"
        project.create_time = now_rfc3339()
        self._projects[project_id] = project
        self._policies[project_id] = PolicyDTO(etag=self._new_etag(), version=0)
        return project.to_json_dict()

    def _get_project(self, project_id: str, params: Dict[str, str]) -> Dict[str, Any]:
        project = self._projects.get(project_id)
        if project is None:
            raise ServiceError(403, f"Project {project_id} not found.")
        return self._select_fields(project.to_json_dict(), params.get("fields"))

    def _list_projects(self, params: Dict[str, str]) -> Dict[str, Any]:
        matching = [
            self._projects[project_id] for project_id in sorted(self._projects)
            if self._matches(self._projects[project_id], params.get("filter"))
        ]
        token = params.get("pageToken")
        if token:
            matching = [project for project in matching if project.project_id >= token]
        page_size = int(params.get("pageSize") or 0)
        next_token = None
        if page_size > 0 and len(matching) > page_size:
            next_token = matching[page_size].project_id
            matching = matching[:page_size]

        fields = params.get("fields")
        project_fields = None
        include_token = True
        if fields:
            selected = _LIST_FIELDS.match(fields)
            project_fields = selected.group(1) if selected else ""
            include_token = "nextPageToken" in fields
        response: Dict[str, Any] = {
            "projects": [self._select_fields(project.to_json_dict(), project_fields) for project in matching]
        }
        if next_token is not None and include_token:
            response["nextPageToken"] = next_token
        return response

    def _replace_project(self, project_id: str, body: Dict[str, Any]) -> Dict[str, Any]:
        project = self._projects.get(project_id)
        if project is None:
            raise ServiceError(
                403, f"Error when replacing project '{project_id}' because the project was not found."
            )
        if project.lifecycle_state != "ACTIVE":
            raise ServiceError(
                400,
                f"Error when replacing project '{project_id}' because the lifecycle state was not ACTIVE.",
                status="FAILED_PRECONDITION"
            )
        replacement = ProjectDTO.model_validate(body)
        if replacement.parent != project.parent and project.parent is not None:
            raise ServiceError(
                400,
                "The server currently only supports setting the parent once and does not allow unsetting it.",
                status="INVALID_ARGUMENT"
            )
        project.name = replacement.name
        project.labels = replacement.labels
        project.parent = replacement.parent
        return project.to_json_dict()

    def _delete_project(self, project_id: str) -> Dict[str, Any]:
        project = self._projects.get(project_id)
        if project is None:
            raise ServiceError(
                403, f"Error when deleting project '{project_id}' because the project was not found."
            )
        if project.lifecycle_state != "ACTIVE":
            raise ServiceError(
                400,
                f"Error when deleting project '{project_id}' because the lifecycle state was not ACTIVE.",
                status="FAILED_PRECONDITION"
            )
        project.lifecycle_state = "DELETE_REQUESTED"
        return {}

    def _undelete_project(self, project_id: str) -> Dict[str, Any]:
        project = self._projects.get(project_id)
        if project is None:
            raise ServiceError(
                403, f"Error when undeleting project '{project_id}' because the project was not found."
            )
        if project.lifecycle_state != "DELETE_REQUESTED":
            raise ServiceError(
                400,
                f"Error when undeleting project '{project_id}' because the lifecycle state was not "
                "DELETE_REQUESTED.",
                status="FAILED_PRECONDITION"
            )
        project.lifecycle_state = "ACTIVE"
        return {}

    @staticmethod
    def _select_fields(project: Dict[str, Any], fields: Optional[str]) -> Dict[str, Any]:
        if fields is None:
            return project
        names = {name.strip() for name in fields.split(",") if name.strip()}
        return {key: value for key, value in project.items() if key in names}

    @staticmethod
    def _matches(project: ProjectDTO, expression: Optional[str]) -> bool:
        """Every ``key:value`` term must match; ``*`` only requires presence."""
        if not expression:
            return True
        for term in expression.split():
            if ":" not in term:
                raise ServiceError(400, f"Could not parse the filter '{expression}'.")
            key, expected = term.split(":", 1)
            key = key.lower()
            if key == "id":
                actual = project.project_id
            elif key == "name":
                actual = project.name
            elif key.startswith("labels."):
                label = key[len("labels."):]
                labels = {name.lower(): value for name, value in (project.labels or {}).items()}
                actual = labels.get(label)
            else:
                raise ServiceError(400, f"Could not parse the filter '{expression}'.")
            if actual is None:
                return False
            if expected != "*" and actual.lower() != expected.lower():
                return False
        return True

    # IAM

    def _get_iam_policy(self, project_id: str) -> Dict[str, Any]:
        if project_id not in self._projects:
            raise ServiceError(403, f"Project {project_id} not found.")
        return self._policies[project_id].to_json_dict()

    def _set_iam_policy(self, project_id: str, body: Dict[str, Any]) -> Dict[str, Any]:
        if project_id not in self._projects:
            raise ServiceError(
                403,
                f"Error when replacing the policy for project '{project_id}' because the project was not found."
            )
        policy = PolicyDTO.model_validate(body.get("policy") or {})
        current = self._policies[project_id]
        if policy.etag is not None and policy.etag != current.etag:
            raise ServiceError(
                409,
                f"Policy etag mismatch when replacing the policy for project {project_id}, "
                "please retrieve the latest policy using getPolicy.",
                status="ABORTED"
            )
        stored = PolicyDTO(bindings=policy.bindings, etag=self._new_etag(), version=0)
        self._policies[project_id] = stored
        return stored.to_json_dict()

    def _test_project_permissions(self, project_id: str, body: Dict[str, Any]) -> Dict[str, Any]:
        if project_id not in self._projects:
            raise ServiceError(403, f"Project {project_id} not found.")
        return {"permissions": list(body.get("permissions") or [])}

    @staticmethod
    def _new_etag() -> str:
        return uuid.uuid4().hex

    # Organization policies

    def _check_resource(self, resource: str):
        if not _ORG_RESOURCE.match(resource):
            raise ServiceError(400, f"Resource '{resource}' is not a valid resource name.")
        if resource.startswith("projects/") and resource.split("/", 1)[1] not in self._projects:
            raise ServiceError(403, f"Project {resource.split('/', 1)[1]} not found.")

    def _constraint_name(self, body: Dict[str, Any]) -> str:
        constraint = body.get("constraint")
        if not constraint:
            raise ServiceError(400, "A constraint is required.")
        if constraint not in {known.name for known in self._constraints}:
            raise ServiceError(400, f"Constraint {constraint} is not available.")
        return constraint

    @staticmethod
    def _org_etag(resource: str, constraint: str, generation: int) -> str:
        return hashlib.sha1(f"{resource}/{constraint}/{generation}".encode()).hexdigest()[:16]

    def _org_record(self, resource: str, constraint: str) -> OrgPolicyRecord:
        return self._org_policies.setdefault((resource, constraint), OrgPolicyRecord())

    def _check_org_etag(self, resource: str, constraint: str, record: OrgPolicyRecord, etag: Optional[str]):
        if etag is not None and etag != self._org_etag(resource, constraint, record.generation):
            raise ServiceError(
                409,
                f"Policy etag mismatch when updating the policy for constraint {constraint} on {resource}.",
                status="ABORTED"
            )

    def _get_org_policy(self, resource: str, body: Dict[str, Any]) -> Dict[str, Any]:
        constraint = self._constraint_name(body)
        record = self._org_record(resource, constraint)
        policy = record.policy.model_copy() if record.policy is not None else OrgPolicyDTO(constraint=constraint)
        policy.etag = self._org_etag(resource, constraint, record.generation)
        return policy.to_json_dict()

    def _get_effective_org_policy(self, resource: str, body: Dict[str, Any]) -> Dict[str, Any]:
        constraint = self._constraint_name(body)
        record = self._org_policies.get((resource, constraint))
        if record is None or record.policy is None:
            return OrgPolicyDTO(constraint=constraint).to_json_dict()
        return record.policy.model_copy(update={"etag": None}).to_json_dict()

    def _set_org_policy(self, resource: str, body: Dict[str, Any]) -> Dict[str, Any]:
        policy = OrgPolicyDTO.model_validate(body.get("policy") or {})
        constraint = self._constraint_name({"constraint": policy.constraint})
        variants = [policy.boolean_policy, policy.list_policy, policy.restore_default]
        if sum(variant is not None for variant in variants) > 1:
            raise ServiceError(400, "Only one policy type may be set.")
        record = self._org_record(resource, constraint)
        self._check_org_etag(resource, constraint, record, policy.etag)
        record.generation += 1
        record.policy = policy.model_copy(update={
            "etag": None,
            "update_time": now_rfc3339(),
            "version": policy.version or 1,
        })
        stored = record.policy.model_copy(update={"etag": self._org_etag(resource, constraint, record.generation)})
        return stored.to_json_dict()

    def _clear_org_policy(self, resource: str, body: Dict[str, Any]) -> Dict[str, Any]:
        constraint = self._constraint_name(body)
        record = self._org_record(resource, constraint)
        self._check_org_etag(resource, constraint, record, body.get("etag"))
        record.generation += 1
        record.policy = None
        return {}

    def _list_org_policies(self, resource: str, body: Dict[str, Any]) -> Dict[str, Any]:
        policies = []
        for (owner, constraint), record in sorted(self._org_policies.items()):
            if owner == resource and record.policy is not None:
                policy = record.policy.model_copy(update={
                    "etag": self._org_etag(resource, constraint, record.generation)
                })
                policies.append(policy.to_json_dict())
        page, next_token = self._offset_page(policies, body.get("pageSize"), body.get("pageToken"))
        return self._page_response("policies", page, next_token)

    def _list_constraints(self, body: Dict[str, Any]) -> Dict[str, Any]:
        constraints = [constraint.to_json_dict() for constraint in self._constraints]
        page, next_token = self._offset_page(constraints, body.get("pageSize"), body.get("pageToken"))
        return self._page_response("constraints", page, next_token)

    # Liens

    def _create_lien(self, body: Dict[str, Any]) -> Dict[str, Any]:
        lien = LienDTO.model_validate(body)
        if not lien.parent:
            raise ServiceError(400, "A lien requires a parent.")
        lien.name = f"liens/{uuid.uuid4().hex[:16]}"
        lien.create_time = now_rfc3339()
        self._liens[lien.name] = lien
        return lien.to_json_dict()

    def _get_lien(self, name: str) -> Dict[str, Any]:
        lien = self._liens.get(name)
        if lien is None:
            raise ServiceError(404, f"Lien {name} not found.")
        return lien.to_json_dict()

    def _list_liens(self, params: Dict[str, str]) -> Dict[str, Any]:
        parent = params.get("parent")
        if not parent:
            raise ServiceError(400, "The parent of the liens to list is required.")
        liens = [lien.to_json_dict() for lien in self._liens.values() if lien.parent == parent]
        page, next_token = self._offset_page(liens, params.get("pageSize"), params.get("pageToken"))
        return self._page_response("liens", page, next_token)

    def _delete_lien(self, name: str) -> Dict[str, Any]:
        if self._liens.pop(name, None) is None:
            raise ServiceError(404, f"Lien {name} not found.")
        return {}

    # Paging

    @staticmethod
    def _offset_page(items: List[Dict[str, Any]], page_size: Any, page_token: Any):
        try:
            start = int(page_token) if page_token else 0
        except ValueError:
            raise ServiceError(400, f"Invalid page token '{page_token}'.") from None
        size = int(page_size or 0)
        if size <= 0:
            return items[start:], None
        end = start + size
        next_token = str(end) if end < len(items) else None
        return items[start:end], next_token

    @staticmethod
    def _page_response(key: str, items: List[Dict[str, Any]], next_token: Optional[str]) -> Dict[str, Any]:
        response: Dict[str, Any] = {key: items}
        if next_token is not None:
            response["nextPageToken"] = next_token
        return response

"""
Project data models for the Resource Manager client.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Dict, List, Mapping, Optional

from .frozen import FrozenDict
from .policy import Policy
from .timestamps import millis_to_rfc3339, rfc3339_to_millis
from .wire import ProjectDTO, ResourceIdDTO

if TYPE_CHECKING:
    from ..service import ResourceManager


class State(str, Enum):
    """Project lifecycle states."""
    LIFECYCLE_STATE_UNSPECIFIED = "LIFECYCLE_STATE_UNSPECIFIED"
    ACTIVE = "ACTIVE"
    DELETE_REQUESTED = "DELETE_REQUESTED"
    DELETE_IN_PROGRESS = "DELETE_IN_PROGRESS"


@dataclass(frozen=True)
class ResourceId:
    """Reference to a parent resource, e.g. an organization."""
    id: str
    type: str

    def to_wire(self) -> ResourceIdDTO:
        return ResourceIdDTO(id=self.id, type=self.type)

    @classmethod
    def from_wire(cls, dto: ResourceIdDTO) -> "ResourceId":
        return cls(id=dto.id, type=dto.type)


@dataclass(frozen=True)
class ProjectInfo:
    """Immutable project metadata.

    ``project_number``, ``state`` and ``create_time_millis`` are assigned by
    the service and are never sent when creating or replacing a project.
    """
    project_id: str
    name: Optional[str] = None
    labels: Mapping[str, str] = field(default_factory=dict)
    project_number: Optional[int] = None
    state: Optional[State] = None
    create_time_millis: Optional[int] = None
    parent: Optional[ResourceId] = None

    def __post_init__(self):
        object.__setattr__(self, "labels", FrozenDict(self.labels or {}))

    def __hash__(self) -> int:
        return hash((
            self.project_id,
            self.name,
            frozenset(self.labels.items()),
            self.project_number,
            self.state,
            self.create_time_millis,
            self.parent,
        ))

    @staticmethod
    def new_builder(project_id: str) -> "ProjectInfoBuilder":
        return ProjectInfoBuilder(project_id)

    def to_builder(self) -> "ProjectInfoBuilder":
        return ProjectInfoBuilder.from_info(self)

    def to_wire(self, include_output_only: bool = True) -> ProjectDTO:
        dto = ProjectDTO(
            project_id=self.project_id,
            name=self.name,
            labels=dict(self.labels) if self.labels else None,
            parent=self.parent.to_wire() if self.parent is not None else None,
        )
        if include_output_only:
            dto.project_number = self.project_number
            dto.lifecycle_state = self.state.value if self.state is not None else None
            dto.create_time = millis_to_rfc3339(self.create_time_millis)
        return dto

    @classmethod
    def from_wire(cls, dto: ProjectDTO) -> "ProjectInfo":
        builder = cls.new_builder(dto.project_id)
        if dto.name is not None:
            builder.set_name(dto.name)
        if dto.labels is not None:
            builder.set_labels(dto.labels)
        if dto.project_number is not None:
            builder.set_project_number(dto.project_number)
        if dto.lifecycle_state is not None:
            builder.set_state(State(dto.lifecycle_state))
        if dto.create_time is not None:
            builder.set_create_time_millis(rfc3339_to_millis(dto.create_time))
        if dto.parent is not None:
            builder.set_parent(ResourceId.from_wire(dto.parent))
        return builder.build()


class ProjectInfoBuilder:
    """Mutable staging object for ``ProjectInfo``."""

    def __init__(self, project_id: str):
        self._project_id = project_id
        self._name: Optional[str] = None
        self._labels: Dict[str, str] = {}
        self._project_number: Optional[int] = None
        self._state: Optional[State] = None
        self._create_time_millis: Optional[int] = None
        self._parent: Optional[ResourceId] = None

    @classmethod
    def from_info(cls, info: ProjectInfo) -> "ProjectInfoBuilder":
        builder = cls(info.project_id)
        builder._name = info.name
        builder._labels = dict(info.labels)
        builder._project_number = info.project_number
        builder._state = info.state
        builder._create_time_millis = info.create_time_millis
        builder._parent = info.parent
        return builder

    def set_project_id(self, project_id: str) -> "ProjectInfoBuilder":
        self._project_id = project_id
        return self

    def set_name(self, name: Optional[str]) -> "ProjectInfoBuilder":
        self._name = name
        return self

    def add_label(self, key: str, value: str) -> "ProjectInfoBuilder":
        self._labels[key] = value
        return self

    def remove_label(self, key: str) -> "ProjectInfoBuilder":
        self._labels.pop(key, None)
        return self

    def clear_labels(self) -> "ProjectInfoBuilder":
        self._labels.clear()
        return self

    def set_labels(self, labels: Optional[Mapping[str, str]]) -> "ProjectInfoBuilder":
        self._labels = dict(labels or {})
        return self

    def set_project_number(self, project_number: Optional[int]) -> "ProjectInfoBuilder":
        self._project_number = project_number
        return self

    def set_state(self, state: Optional[State]) -> "ProjectInfoBuilder":
        self._state = state
        return self

    def set_create_time_millis(self, create_time_millis: Optional[int]) -> "ProjectInfoBuilder":
        self._create_time_millis = create_time_millis
        return self

    def set_parent(self, parent: Optional[ResourceId]) -> "ProjectInfoBuilder":
        self._parent = parent
        return self

    def build(self) -> ProjectInfo:
        if not self._project_id:
            raise ValueError("project_id is required")
        return ProjectInfo(
            project_id=self._project_id,
            name=self._name,
            labels=dict(self._labels),
            project_number=self._project_number,
            state=self._state,
            create_time_millis=self._create_time_millis,
            parent=self._parent,
        )


@dataclass(frozen=True)
class Project:
    """A project returned by the service.

    Operations on the project take the owning ``ResourceManager`` explicitly.
    """
    info: ProjectInfo

    @property
    def project_id(self) -> str:
        return self.info.project_id

    @property
    def name(self) -> Optional[str]:
        return self.info.name

    @property
    def labels(self) -> Mapping[str, str]:
        return self.info.labels

    @property
    def project_number(self) -> Optional[int]:
        return self.info.project_number

    @property
    def state(self) -> Optional[State]:
        return self.info.state

    @property
    def create_time_millis(self) -> Optional[int]:
        return self.info.create_time_millis

    @property
    def parent(self) -> Optional[ResourceId]:
        return self.info.parent

    def to_builder(self) -> ProjectInfoBuilder:
        return self.info.to_builder()

    def reload(self, client: "ResourceManager", *options) -> Optional["Project"]:
        """Fetch the latest state of this project, or None if it is gone."""
        return client.get(self.project_id, *options)

    def delete(self, client: "ResourceManager") -> None:
        client.delete(self.project_id)

    def undelete(self, client: "ResourceManager") -> None:
        client.undelete(self.project_id)

    def replace(self, client: "ResourceManager") -> "Project":
        return client.replace(self.info)

    def get_policy(self, client: "ResourceManager") -> Optional[Policy]:
        return client.get_policy(self.project_id)

    def replace_policy(self, client: "ResourceManager", policy: Policy) -> Policy:
        return client.replace_policy(self.project_id, policy)

    def test_permissions(self, client: "ResourceManager", permissions: List[str]) -> List[bool]:
        return client.test_permissions(self.project_id, permissions)

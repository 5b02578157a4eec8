"""
Typed call options for the Resource Manager client.

Each option wraps one ``Option`` key and its wire value; ``option_map``
collects them into the mapping the RPC facade accepts.
"""

from enum import Enum
from typing import Any, Dict, Iterable

from .rpc.base import Option


class ProjectField(Enum):
    """Project fields that can be selected in get and list calls."""
    PROJECT_ID = "projectId"
    NAME = "name"
    LABELS = "labels"
    PROJECT_NUMBER = "projectNumber"
    STATE = "lifecycleState"
    CREATE_TIME = "createTime"
    PARENT = "parent"

    @staticmethod
    def selector(*fields: "ProjectField") -> str:
        """Comma-separated field names; the project id is always selected."""
        names = [ProjectField.PROJECT_ID.value]
        for project_field in fields:
            if project_field.value not in names:
                names.append(project_field.value)
        return ",".join(names)


class CallOption:
    """A single option key bound to its value."""

    def __init__(self, rpc_option: Option, value: Any):
        self.rpc_option = rpc_option
        self.value = value

    def __eq__(self, other: object) -> bool:
        return (
            type(self) is type(other)
            and self.rpc_option == other.rpc_option
            and self.value == other.value
        )

    def __hash__(self) -> int:
        return hash((type(self), self.rpc_option, self.value))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.rpc_option.name}={self.value!r})"


class ProjectGetOption(CallOption):
    """Options for fetching a single project."""

    @classmethod
    def fields(cls, *fields: ProjectField) -> "ProjectGetOption":
        return cls(Option.FIELDS, ProjectField.selector(*fields))


class ProjectListOption(CallOption):
    """Options for listing projects."""

    @classmethod
    def filter(cls, expression: str) -> "ProjectListOption":
        """Filter such as ``name:my-* labels.env:prod``; matching is case-insensitive."""
        return cls(Option.FILTER, expression)

    @classmethod
    def page_size(cls, size: int) -> "ProjectListOption":
        return cls(Option.PAGE_SIZE, size)

    @classmethod
    def page_token(cls, token: str) -> "ProjectListOption":
        return cls(Option.PAGE_TOKEN, token)

    @classmethod
    def fields(cls, *fields: ProjectField) -> "ProjectListOption":
        return cls(Option.FIELDS, f"projects({ProjectField.selector(*fields)}),nextPageToken")


class LienListOption(CallOption):
    """Options for listing liens."""

    @classmethod
    def page_size(cls, size: int) -> "LienListOption":
        return cls(Option.PAGE_SIZE, size)

    @classmethod
    def page_token(cls, token: str) -> "LienListOption":
        return cls(Option.PAGE_TOKEN, token)


class OrgPolicyListOption(CallOption):
    """Options for listing organization policies and available constraints."""

    @classmethod
    def page_size(cls, size: int) -> "OrgPolicyListOption":
        return cls(Option.PAGE_SIZE, size)

    @classmethod
    def page_token(cls, token: str) -> "OrgPolicyListOption":
        return cls(Option.PAGE_TOKEN, token)


def option_map(options: Iterable[CallOption]) -> Dict[Option, Any]:
    """Collect options into an RPC option mapping.

    Raises:
        ValueError: if the same option key is given twice.
    """
    result: Dict[Option, Any] = {}
    for option in options:
        if option.rpc_option in result:
            raise ValueError(f"Duplicate option {option.rpc_option.name}")
        result[option.rpc_option] = option.value
    return result

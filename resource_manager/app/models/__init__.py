"""
Entity models for the Resource Manager client.

Domain values are immutable dataclasses built through mutable builders and
converted to and from the wire DTOs in ``wire`` only at the RPC boundary.
"""

from .constraint import BooleanConstraint, ConstraintDefault, ConstraintInfo, ListConstraint
from .lien import Lien, LienInfo, LienInfoBuilder
from .org_policy import (
    AllValues,
    BooleanPolicy,
    ListPolicy,
    OrgPolicyInfo,
    OrgPolicyInfoBuilder,
    RestoreDefault,
)
from .policy import Identity, Policy, PolicyBuilder, Role
from .project import Project, ProjectInfo, ProjectInfoBuilder, ResourceId, State

__all__ = [
    "AllValues",
    "BooleanConstraint",
    "BooleanPolicy",
    "ConstraintDefault",
    "ConstraintInfo",
    "Identity",
    "Lien",
    "LienInfo",
    "LienInfoBuilder",
    "ListConstraint",
    "ListPolicy",
    "OrgPolicyInfo",
    "OrgPolicyInfoBuilder",
    "Policy",
    "PolicyBuilder",
    "Project",
    "ProjectInfo",
    "ProjectInfoBuilder",
    "ResourceId",
    "RestoreDefault",
    "Role",
    "State",
]

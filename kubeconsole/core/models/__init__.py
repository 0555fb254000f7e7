"""
Domain models — pydantic schemas shared across the console.
"""

from kubeconsole.core.models.action import (
    ActionDescriptor,
    ActionInvocation,
    ParamSpec,
    Receipt,
)
from kubeconsole.core.models.environment import DistroProfile, EnvironmentReport
from kubeconsole.core.models.tool import InstallResult, ToolSpec

__all__ = [
    "ActionDescriptor",
    "ActionInvocation",
    "DistroProfile",
    "EnvironmentReport",
    "InstallResult",
    "ParamSpec",
    "Receipt",
    "ToolSpec",
]

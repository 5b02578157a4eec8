"""
Testing utilities for code that uses the Resource Manager client.
"""

from .local_helper import LocalResourceManagerHelper, ServiceError

__all__ = ["LocalResourceManagerHelper", "ServiceError"]

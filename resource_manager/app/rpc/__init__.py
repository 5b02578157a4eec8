"""
RPC facade for the Resource Manager service.
"""

from .base import Option, ResourceManagerRpc, RpcOptions, to_query_params
from .http_rpc import HttpResourceManagerRpc

__all__ = [
    "HttpResourceManagerRpc",
    "Option",
    "ResourceManagerRpc",
    "RpcOptions",
    "to_query_params",
]

from .results import ForwardFailure, ForwardResult, ForwardSuccess
from .errors import ErrorKind, build_failure, kind_for_upstream_status, route_not_found
from .route_table import ROUTE_TABLE, RouteDescriptor, resolve
from .forwarder import Forwarder

__all__ = [
    "ForwardFailure",
    "ForwardResult",
    "ForwardSuccess",
    "ErrorKind",
    "build_failure",
    "kind_for_upstream_status",
    "route_not_found",
    "ROUTE_TABLE",
    "RouteDescriptor",
    "resolve",
    "Forwarder",
]

from .actions import routes as actions_routes
from .common import routes as common_routes
from .errors import handle_errors, log_requests
from .keys import DRIVE

__all__ = [
    "actions_routes",
    "common_routes",
    "handle_errors",
    "log_requests",
    "DRIVE",
]

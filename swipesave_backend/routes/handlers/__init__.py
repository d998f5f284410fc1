"""
Route handlers.
"""
from .health import register_health_routes
from .queue import register_queue_routes
from .version import register_version_routes
from .workflow import register_workflow_routes

__all__ = [
    "register_health_routes",
    "register_queue_routes",
    "register_version_routes",
    "register_workflow_routes",
]

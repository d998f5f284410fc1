"""HTTP routes for the Swipe Save backend."""

from .registry import register_routes

__all__ = ["register_routes"]

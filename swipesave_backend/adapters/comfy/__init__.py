"""ComfyUI HTTP adapter."""

from .client import ComfyClient, generate_client_id
from .object_info_cache import ObjectInfoCache

__all__ = ["ComfyClient", "ObjectInfoCache", "generate_client_id"]

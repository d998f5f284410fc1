"""
Async client for a ComfyUI server.

Endpoints used:
  - POST /prompt          queue an API graph
  - GET  /queue           running/pending jobs (also the health probe)
  - POST /queue           {"clear": true} or {"delete": [...]}
  - POST /interrupt       stop the running job
  - GET  /object_info     node catalog (cached)

Submissions are never retried; a failed POST surfaces as SubmissionError.
"""
from __future__ import annotations

import asyncio
import json
import random
import string
import time
from typing import Any

from aiohttp import ClientError, ClientSession, ClientTimeout

from ...shared import SubmissionError, get_logger, sanitize_error_message
from .object_info_cache import ObjectInfoCache

logger = get_logger(__name__)

CLIENT_ID_PREFIX = "swipe-save"
_ID_ALPHABET = string.ascii_lowercase + string.digits


def generate_client_id() -> str:
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    return f"{CLIENT_ID_PREFIX}-{int(time.time() * 1000)}-{suffix}"


def _decode_body(text: str) -> Any:
    if not text or not text.strip():
        return None
    try:
        return json.loads(text)
    except ValueError:
        return None


class ComfyClient:
    def __init__(
        self,
        base_url: str,
        timeout_s: float = 30.0,
        health_ttl_s: float = 30.0,
        object_info_cache: ObjectInfoCache | None = None,
        health_cache: ObjectInfoCache | None = None,
    ):
        self.base_url = str(base_url or "").rstrip("/")
        self.timeout_s = float(timeout_s)
        self.object_info_cache = object_info_cache if object_info_cache is not None else ObjectInfoCache()
        self.health_cache = health_cache if health_cache is not None else ObjectInfoCache(health_ttl_s)

    def with_base_url(self, base_url: str | None) -> "ComfyClient":
        """Client for another ComfyUI instance sharing this client's caches."""
        if not base_url or str(base_url).rstrip("/") == self.base_url:
            return self
        return ComfyClient(
            base_url,
            timeout_s=self.timeout_s,
            object_info_cache=self.object_info_cache,
            health_cache=self.health_cache,
        )

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    async def _request(self, method: str, path: str, payload: Any = None) -> tuple[int, str]:
        url = self._url(path)
        try:
            async with ClientSession(timeout=ClientTimeout(total=self.timeout_s)) as session:
                async with session.request(method, url, json=payload) as resp:
                    return resp.status, await resp.text()
        except asyncio.TimeoutError as exc:
            raise SubmissionError(f"Timed out contacting ComfyUI at {self.base_url}") from exc
        except ClientError as exc:
            raise SubmissionError(
                sanitize_error_message(exc, f"Cannot reach ComfyUI at {self.base_url}")
            ) from exc

    async def _request_json(self, method: str, path: str, payload: Any = None) -> Any:
        status, text = await self._request(method, path, payload)
        body = _decode_body(text)
        if not 200 <= status < 300:
            raise SubmissionError(
                f"ComfyUI {method} {path} returned {status}",
                status=status,
                payload=body if body is not None else text,
            )
        return body

    async def submit_prompt(
        self,
        graph: dict[str, Any],
        client_id: str | None = None,
        extra_pnginfo: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Queue one API graph.

        A 2xx response whose body carries an `error` object is still a failure.
        """
        body: dict[str, Any] = {"prompt": graph, "client_id": client_id or generate_client_id()}
        if extra_pnginfo:
            body["extra_data"] = {"extra_pnginfo": extra_pnginfo}
        status, text = await self._request("POST", "/prompt", body)
        payload = _decode_body(text)
        if not 200 <= status < 300:
            raise SubmissionError(
                f"ComfyUI rejected the prompt ({status})",
                status=status,
                payload=payload if payload is not None else text,
            )
        if not isinstance(payload, dict):
            raise SubmissionError("ComfyUI returned a non-JSON response to /prompt", status=status, payload=text)
        if payload.get("error"):
            error = payload.get("error")
            detail = error.get("message") if isinstance(error, dict) else str(error)
            raise SubmissionError(f"ComfyUI rejected the prompt: {detail}", status=status, payload=payload)
        prompt_id = payload.get("prompt_id") or payload.get("id")
        logger.debug("Queued prompt %s (number=%s)", prompt_id, payload.get("number"))
        return {
            "prompt_id": prompt_id,
            "number": payload.get("number"),
            "node_errors": payload.get("node_errors") or {},
            "raw": payload,
        }

    async def get_queue(self) -> dict[str, Any]:
        body = await self._request_json("GET", "/queue")
        if not isinstance(body, dict):
            return {"queue_running": [], "queue_pending": []}
        return {
            "queue_running": body.get("queue_running") or [],
            "queue_pending": body.get("queue_pending") or [],
        }

    async def clear_queue(self, ids: list[str] | None = None) -> bool:
        """Delete the given pending prompt ids, or the whole pending queue when none are given."""
        payload: dict[str, Any] = {"delete": list(ids)} if ids else {"clear": True}
        # ComfyUI answers with an empty body here; anything 2xx is success.
        await self._request_json("POST", "/queue", payload)
        return True

    async def interrupt(self) -> bool:
        await self._request_json("POST", "/interrupt")
        return True

    async def get_object_info(self, *, refresh: bool = False) -> dict[str, Any]:
        key = f"object_info:{self.base_url}"
        if not refresh:
            cached = self.object_info_cache.get(key)
            if cached is not None:
                return cached
        body = await self._request_json("GET", "/object_info")
        info = body if isinstance(body, dict) else {}
        self.object_info_cache.put(key, info)
        return info

    async def health_check(self, *, refresh: bool = False) -> dict[str, Any]:
        """Probe GET /queue; result (healthy or not) is cached for the health TTL."""
        key = f"health:{self.base_url}"
        if not refresh:
            cached = self.health_cache.get(key)
            if cached is not None:
                return dict(cached, cached=True)
        started = time.perf_counter()
        try:
            queue = await self.get_queue()
            result = {
                "healthy": True,
                "url": self.base_url,
                "latency_ms": round((time.perf_counter() - started) * 1000, 1),
                "queue_running": len(queue["queue_running"]),
                "queue_pending": len(queue["queue_pending"]),
            }
        except SubmissionError as exc:
            logger.warning("ComfyUI health check failed for %s: %s", self.base_url, exc)
            result = {"healthy": False, "url": self.base_url, "error": str(exc), "status": exc.status}
        self.health_cache.put(key, result)
        return dict(result, cached=False)

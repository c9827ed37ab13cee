"""
HTTP client for the review API.

Used by scripts and the reviewer UI to talk to a running backend. Reads go
through a short-lived response cache and are retried with exponential backoff
on transport failures; writes are sent once and clear the cache.
"""
from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Hashable, Optional, Tuple
from urllib.parse import quote

import httpx

logger = logging.getLogger(__name__)

REVIEW_FIELDS = (
    "preference",
    "pressure",
    "underserved",
    "leadership",
    "academic",
    "research",
    "personal",
    "notes",
    "decision",
)


class ApiClientError(Exception):
    """The API answered with an error envelope (or could not be reached)."""

    def __init__(self, message: str, status_code: Optional[int] = None, error: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error = error


class ResponseCache:
    """Time-boxed cache of decoded GET responses, keyed by path and params."""

    def __init__(self, ttl: float = 30.0, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[Hashable, Tuple[float, Any]] = {}

    def get(self, key: Hashable) -> Any:
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, value = entry
        if self._clock() - stored_at > self.ttl:
            del self._entries[key]
            return None
        return value

    def set(self, key: Hashable, value: Any) -> None:
        self._entries[key] = (self._clock(), value)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


def _cache_key(path: str, params: Optional[Dict[str, Any]]) -> Hashable:
    return path, tuple(sorted((params or {}).items()))


class ReviewApiClient:
    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        *,
        timeout: float = 10.0,
        retries: int = 2,
        backoff: float = 1.0,
        cache_ttl: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.retries = retries
        self.backoff = backoff
        self.cache = ResponseCache(ttl=cache_ttl, clock=clock)
        self._sleep = sleep
        self._client = httpx.Client(base_url=base_url.rstrip("/"), timeout=timeout, transport=transport)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "ReviewApiClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # --- transport ---

    @staticmethod
    def _unwrap(response: httpx.Response) -> Any:
        try:
            body = response.json()
        except ValueError:
            body = None

        if response.is_error:
            if isinstance(body, dict):
                raise ApiClientError(
                    body.get("message") or response.reason_phrase,
                    status_code=response.status_code,
                    error=body.get("error"),
                )
            raise ApiClientError(response.text or response.reason_phrase, status_code=response.status_code)

        if isinstance(body, dict) and "success" in body:
            return body.get("data")
        return body

    def _send(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            return self._client.request(method, path, **kwargs)
        except httpx.TransportError as e:
            raise ApiClientError(f"{method} {path} failed: {e}") from e

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None, *, use_cache: bool = True) -> Any:
        key = _cache_key(path, params)
        if use_cache:
            cached = self.cache.get(key)
            if cached is not None:
                return cached

        attempt = 0
        while True:
            try:
                response = self._client.get(path, params=params)
            except httpx.TransportError as e:
                if attempt >= self.retries:
                    raise ApiClientError(f"GET {path} failed after {attempt + 1} attempts: {e}") from e
                delay = self.backoff * (2 ** attempt)
                logger.warning("GET %s failed (%s), retrying in %.1fs", path, e, delay)
                self._sleep(delay)
                attempt += 1
                continue
            break

        data = self._unwrap(response)
        if use_cache and data is not None:
            self.cache.set(key, data)
        return data

    def _write(self, method: str, path: str, payload: Any = None) -> Any:
        response = self._send(method, path, json=payload)
        self.cache.clear()
        return self._unwrap(response)

    # --- applicants / reviewers ---

    def list_applicants(self, category: Optional[str] = None):
        if category == "regular":
            return self._get("/api/applicants/regular")
        if category == "i-sub":
            return self._get("/api/applicants/i-sub")
        return self._get("/api/applicants")

    def get_distribution(self):
        return self._get("/api/applicants/distribution")

    def assign_applicants(self):
        return self._write("POST", "/api/applicants/distribution")

    def list_reviewers(self):
        return self._get("/api/reviewers")

    # --- reviews ---

    def get_review(self, applicant_id: int, reviewer_name: str) -> Optional[dict]:
        """The reviewer's review of the applicant, or None when there is none yet."""
        try:
            return self._get(
                "/api/reviews",
                {"applicant_id": applicant_id, "reviewer_name": reviewer_name},
                use_cache=False,
            )
        except ApiClientError as e:
            if e.status_code == 404:
                return None
            raise

    def list_reviews_for_applicant(self, applicant_id: int):
        return self._get(f"/api/reviews/applicant/{applicant_id}")

    def save_review(
        self,
        applicant_id: int,
        reviewer_name: str,
        changes: Dict[str, Any],
        current: Optional[Dict[str, Any]] = None,
    ) -> dict:
        """Merge `changes` into the current review and send the full review back.

        When `current` is not given the review is fetched first; a missing
        review is treated as empty and gets created by the upsert.
        """
        if current is None:
            current = self.get_review(applicant_id, reviewer_name) or {}
        payload = {field: current.get(field) for field in REVIEW_FIELDS}
        payload.update({k: v for k, v in changes.items() if k in REVIEW_FIELDS})
        path = f"/api/reviews/{applicant_id}/{quote(reviewer_name, safe='')}"
        return self._write("PATCH", path, payload)

    def list_final_selections(self):
        return self._get("/api/reviews/final-selections")

    def set_final_selection(self, applicant_id: int, admin_decision: str, selection_reason: Optional[str] = None):
        return self._write(
            "POST",
            "/api/reviews/final-selections",
            {"applicant_id": applicant_id, "admin_decision": admin_decision, "selection_reason": selection_reason},
        )

    # --- progress ---

    def get_progress(self):
        return self._get("/api/progress")

    def get_dashboard(self):
        return self._get("/api/progress/dashboard")

    def get_stats(self):
        return self._get("/api/progress/stats")

    def export_progress_csv(self) -> str:
        response = self._send("GET", "/api/progress/export/csv")
        if response.is_error:
            self._unwrap(response)
        return response.text

    def check_health(self, timeout: float = 5.0) -> bool:
        try:
            response = self._client.get("/api/health", timeout=timeout)
        except httpx.HTTPError as e:
            logger.warning("Health check failed: %s", e)
            return False
        return response.status_code == 200


__all__ = ["ApiClientError", "ResponseCache", "ReviewApiClient", "REVIEW_FIELDS"]

# backend/app/schemas/common.py
from typing import Any, Dict


def success(data: Any = None, **extra: Any) -> Dict[str, Any]:
    """Success envelope shared by all endpoints: {"success": true, "data": ...}."""
    body: Dict[str, Any] = {"success": True}
    if data is not None:
        body["data"] = data
    body.update(extra)
    return body

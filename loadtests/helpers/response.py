"""Response error extraction for load test observability.

Parses Marketplace API error responses into human-readable messages.
Handles three response shapes:

- Pydantic validation (422): {"detail": [{"loc": [...], "msg": "...", "type": "..."}]}
- Marketplace errors (401/403/404/409/500): {"status": "conflict", "error": "msg", "items": [...]}
- Protean validation (400): {"error": {"field": ["msg"]}}
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from requests.exceptions import JSONDecodeError

if TYPE_CHECKING:
    from requests import Response


def extract_error_detail(response: Response) -> str:
    """Extract a human-readable error message from an API error response.

    Returns a compact string suitable for Locust failure messages and log lines.
    """
    try:
        body = response.json()
    except JSONDecodeError:
        # Not JSON: return raw text, truncated
        text = getattr(response, "text", "") or ""
        return text[:300] or "(empty response body)"

    if "detail" in body and isinstance(body["detail"], list):
        parts = []
        for err in body["detail"]:
            loc = ".".join(str(p) for p in err.get("loc", []))
            msg = err.get("msg", str(err))
            parts.append(f"{loc}: {msg}" if loc else msg)
        return " | ".join(parts)

    if "error" in body:
        error = body["error"]
        if isinstance(error, dict):
            message = " | ".join(f"{k}: {v}" for k, v in error.items())
        else:
            message = str(error)
        if body.get("items"):
            message += f" (items: {', '.join(line['item_id'] for line in body['items'])})"
        return message

    return str(body)[:300]

"""Response error extraction for load test observability.

Parses Storefront API error responses into human-readable messages.
Every error leaves the API as {"error": "msg", "code": "CODE", "details": {...}}.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from requests import Response


def extract_error_detail(response: Response) -> str:
    """Extract a human-readable error message from an API error response.

    Returns a compact string suitable for Locust failure messages and log lines.
    Gracefully handles unparseable bodies and missing fields.
    """
    try:
        body = response.json()
    except ValueError:
        # Not JSON: return raw text, truncated
        text = getattr(response, "text", "") or ""
        return text[:300] or "(empty response body)"

    if not isinstance(body, dict) or "error" not in body:
        return str(body)[:300]

    message = f"{body.get('code', 'ERROR')}: {body['error']}"
    details = body.get("details")
    if isinstance(details, dict) and details:
        message += " (" + " | ".join(f"{k}: {v}" for k, v in details.items()) + ")"
    return message

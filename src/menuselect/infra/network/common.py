from __future__ import annotations

from typing import Any, Optional

import requests

USER_AGENT = "MenuSelect-Client/1.0.0"
DEFAULT_TIMEOUT = 10
DEFAULT_API_URL = "http://localhost:8000/api"


def extract_error_message(response: Optional[requests.Response]) -> Optional[str]:
    """
    Pull the human readable 'message' out of an API error body.

    The backend answers either {"message": "..."} or, for validation
    errors, {"message": ["...", "..."]}.
    """
    if response is None:
        return None
    try:
        body: Any = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None

    message = body.get("message")
    if isinstance(message, list):
        return "; ".join(str(m) for m in message)
    if message:
        return str(message)
    return None

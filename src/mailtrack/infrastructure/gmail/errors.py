"""Translate Google HTTP responses into the mailtrack error taxonomy."""

from __future__ import annotations

import httpx

from mailtrack.domain.errors import RemoteError, RemoteNotFound, RemoteTransient


def provider_error_message(response: httpx.Response) -> str:
    """Google's own error text, falling back to the HTTP reason phrase."""
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        # OAuth token endpoint shape: {"error": "invalid_grant", "error_description": "..."}
        if isinstance(error, str):
            return str(body.get("error_description") or error)

    return response.reason_phrase or f"HTTP {response.status_code}"


def oauth_error_code(response: httpx.Response) -> str:
    """The OAuth token endpoint's `error` code, e.g. `invalid_grant`; empty when absent."""
    try:
        body = response.json()
    except ValueError:
        return ""
    if isinstance(body, dict) and isinstance(body.get("error"), str):
        return body["error"]
    return ""


def raise_for_response(response: httpx.Response) -> None:
    if response.is_success:
        return

    message = provider_error_message(response)
    status = response.status_code
    if status == 404:
        raise RemoteNotFound(message, status_code=status)
    if status == 429 or status >= 500:
        raise RemoteTransient(message, status_code=status)
    raise RemoteError(message, status_code=status)

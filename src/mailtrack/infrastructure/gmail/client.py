"""Gmail REST client bound to one account's OAuth tokens."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Optional, Sequence

import httpx
from loguru import logger

from mailtrack.domain.entities.account import TokenSet
from mailtrack.domain.entities.email_message import RemoteMessage
from mailtrack.domain.entities.history import HistoryRecord, WatchResult
from mailtrack.domain.errors import RemoteTransient
from mailtrack.infrastructure.gmail.errors import raise_for_response
from mailtrack.infrastructure.gmail.mapper import (
    decode_base64url,
    encode_base64url,
    gmail_to_history_record,
    gmail_to_remote_message,
)
from mailtrack.infrastructure.gmail.oauth import GoogleOAuthClient

TokenCallback = Callable[[TokenSet], None]


class GmailClient:
    """Authorized Gmail API client.

    Expired access tokens are refreshed transparently. ``on_tokens`` runs
    synchronously with the new token set before the pending request is
    sent, so rotated credentials are stored before any call returns.
    """

    BASE_URL = "https://gmail.googleapis.com/gmail/v1/users"

    def __init__(
        self,
        account_id: str,
        tokens: TokenSet,
        oauth: GoogleOAuthClient,
        on_tokens: Optional[TokenCallback] = None,
        http: Optional[httpx.Client] = None,
        user_id: str = "me",
        expiry_skew_seconds: int = 60,
    ) -> None:
        self.account_id = account_id
        self.oauth = oauth
        self.on_tokens = on_tokens
        self.http = http or oauth.http
        self.user_id = user_id
        self.expiry_skew_seconds = expiry_skew_seconds
        self._tokens = tokens

    @property
    def tokens(self) -> TokenSet:
        return self._tokens

    def _access_token(self, force_refresh: bool = False) -> str:
        if force_refresh or self._tokens.expires_within(self.expiry_skew_seconds):
            tokens = self.oauth.refresh(self.account_id, self._tokens.refresh_token)
            if self.on_tokens:
                self.on_tokens(tokens)
            self._tokens = tokens
        return self._tokens.access_token

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict[str, Any]] = None,
        json: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        url = f"{self.BASE_URL}/{self.user_id}/{path}"
        response = self._send(method, url, params, json, self._access_token())

        if response.status_code == 401:
            logger.debug(f"Access token rejected for account {self.account_id}, refreshing")
            response = self._send(method, url, params, json, self._access_token(force_refresh=True))

        raise_for_response(response)
        return response.json() if response.content else {}

    def _send(
        self,
        method: str,
        url: str,
        params: Optional[dict[str, Any]],
        json: Optional[dict[str, Any]],
        token: str,
    ) -> httpx.Response:
        try:
            return self.http.request(
                method,
                url,
                params=params,
                json=json,
                headers={"Authorization": f"Bearer {token}"},
            )
        except httpx.TransportError as e:
            raise RemoteTransient(f"Gmail API unreachable: {e}") from e

    def get_profile(self) -> dict[str, Any]:
        return self._request("GET", "profile")

    def list_history(self, start_history_id: int) -> list[HistoryRecord]:
        """All history records after ``start_history_id``, in provider order."""
        records: list[HistoryRecord] = []
        page_token: Optional[str] = None

        while True:
            params: dict[str, Any] = {
                "startHistoryId": str(start_history_id),
                "historyTypes": "messageAdded",
            }
            if page_token:
                params["pageToken"] = page_token

            data = self._request("GET", "history", params=params)
            records.extend(gmail_to_history_record(item) for item in data.get("history") or [])

            page_token = data.get("nextPageToken")
            if not page_token:
                break

        return records

    def get_message(self, message_id: str) -> RemoteMessage:
        data = self._request("GET", f"messages/{message_id}", params={"format": "full"})
        return gmail_to_remote_message(data)

    def get_attachment(self, message_id: str, attachment_id: str) -> bytes:
        data = self._request("GET", f"messages/{message_id}/attachments/{attachment_id}")
        return decode_base64url(data.get("data") or "")

    def send_message(self, raw: bytes, thread_id: Optional[str] = None) -> str:
        body: dict[str, Any] = {"raw": encode_base64url(raw)}
        if thread_id:
            body["threadId"] = thread_id
        data = self._request("POST", "messages/send", json=body)
        return data["id"]

    def watch(self, topic_name: str, label_ids: Sequence[str], label_filter_action: str) -> WatchResult:
        data = self._request(
            "POST",
            "watch",
            json={
                "topicName": topic_name,
                "labelIds": list(label_ids),
                "labelFilterAction": label_filter_action,
            },
        )
        expiration_ms = int(data.get("expiration") or 0)
        history_id = data.get("historyId")
        return WatchResult(
            history_id=int(history_id) if history_id else None,
            expiration=datetime.fromtimestamp(expiration_ms / 1000, timezone.utc) if expiration_ms else None,
        )

    def stop(self) -> None:
        self._request("POST", "stop")

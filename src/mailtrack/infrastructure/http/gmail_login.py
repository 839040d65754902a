"""OAuth redirect flow that links a Gmail account."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse, RedirectResponse
from loguru import logger

from mailtrack.domain.errors import MailTrackError, RemoteError
from mailtrack.infrastructure.gmail.client import GmailClient
from mailtrack.infrastructure.tracker import MailTracker, get_tracker

router = APIRouter()

ACCESS_DENIED_MESSAGE = "access denied"
MISSING_REFRESH_TOKEN_MESSAGE = (
    "You must remove this application from your Google account's connected apps "
    "before reconnecting this account."
)
MISSING_PROFILE_EMAIL_MESSAGE = "Google did not return an email address for this account."


@router.get("/gmailLogin", response_model=None)
def gmail_login(
    code: str | None = None,
    error: str | None = None,
    tracker: MailTracker = Depends(get_tracker),
) -> PlainTextResponse | RedirectResponse:
    """
    Link a Gmail account.

    Without a code the browser is sent to Google's consent screen. On
    return the code is exchanged for tokens, the account is stored and the
    browser goes back to the application's integration settings.
    """
    settings = tracker.settings

    # No code yet: start the consent dialog
    if not code:
        if error:
            logger.info(f"Gmail consent refused: {error}")
            return PlainTextResponse(ACCESS_DENIED_MESSAGE)
        return RedirectResponse(tracker.oauth.authorize_url(force_consent=settings.google_oauth_force_consent))

    try:
        tokens = tracker.oauth.exchange_code(code)
    except RemoteError as e:
        logger.error(f"Gmail code exchange failed: {e.message}")
        return PlainTextResponse(e.message, status_code=502)

    if not tokens.refresh_token:
        logger.warning("Gmail authorization returned no refresh token")
        return PlainTextResponse(MISSING_REFRESH_TOKEN_MESSAGE)

    # Nothing is stored yet, so the profile lookup runs without token persistence
    profile_client = GmailClient(
        account_id="pending",
        tokens=tokens,
        oauth=tracker.oauth,
        expiry_skew_seconds=0,
    )
    try:
        profile = profile_client.get_profile()
    except RemoteError as e:
        logger.error(f"Gmail profile lookup failed: {e.message}")
        return PlainTextResponse(e.message, status_code=502)

    email = (profile.get("emailAddress") or "").strip()
    if not email:
        logger.error("Gmail profile lookup returned no email address")
        return PlainTextResponse(MISSING_PROFILE_EMAIL_MESSAGE, status_code=502)

    account = tracker.accounts.upsert_authorized(email, "gmail", profile_client.tokens)

    if tracker.tracking_enabled:
        try:
            tracker.watcher.start_watch(account.id)
        except MailTrackError as e:
            logger.warning(f"Could not start watch for {email}: {e}")

    return RedirectResponse(f"{settings.main_app_domain}/settings/integrations?gmailAuthorized=true")

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional


@dataclass(frozen=True)
class TokenSet:
    access_token: str
    refresh_token: str
    expiry: Optional[datetime] = None
    scope: str = ""

    def expires_within(self, seconds: int) -> bool:
        if not self.access_token:
            return True
        if self.expiry is None:
            return False
        return self.expiry - timedelta(seconds=seconds) <= datetime.now(timezone.utc)


@dataclass(frozen=True)
class Account:
    id: str
    email: str
    kind: str
    tokens: TokenSet
    # Gmail historyId watermark; None until the first notification seeds it
    history_id: Optional[int] = None
    revoked_at: Optional[datetime] = None
    # Bumped on every re-authorization; cursor writes from an older generation are dropped
    generation: int = 0

    @property
    def is_revoked(self) -> bool:
        return self.revoked_at is not None

"""Persisted admin session credentials.

The login flow that writes the session file is out of scope; this module only
reads the token and tenant the admin UI attaches to every API request.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_TENANT = "default"
DEFAULT_SESSION_FILE = Path.home() / ".onboarding_admin" / "session.json"


@dataclass(frozen=True)
class SessionCredentials:
    access_token: str = ""
    tenant_id: str = DEFAULT_TENANT

    def headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.access_token}" if self.access_token else "",
            "X-Tenant-ID": self.tenant_id or DEFAULT_TENANT,
        }

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "SessionCredentials":
        """Environment first, then the session file, then anonymous defaults."""
        stored: dict = {}
        session_path = path or Path(os.environ.get("ONBOARDING_SESSION_FILE") or DEFAULT_SESSION_FILE)
        try:
            if session_path.exists():
                data = json.loads(session_path.read_text(encoding="utf-8"))
                stored = data if isinstance(data, dict) else {}
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning("session.read_failed path=%s error=%s", session_path, e)
        token = os.environ.get("ONBOARDING_ACCESS_TOKEN") or str(stored.get("accessToken") or "")
        tenant = os.environ.get("ONBOARDING_TENANT_ID") or str(stored.get("tenantId") or DEFAULT_TENANT)
        return cls(access_token=token, tenant_id=tenant)


__all__ = ["SessionCredentials", "DEFAULT_TENANT", "DEFAULT_SESSION_FILE"]

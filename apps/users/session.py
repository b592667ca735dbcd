"""Session values owned by the users domain."""

from __future__ import annotations

from shared.infrastructure.session import SessionValue

# Authenticated dashboard user, kept next to Django's own auth keys.
admin_user_id: SessionValue[int] = SessionValue("userId", load=int)

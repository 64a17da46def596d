"""Account moderation library: derived login state and safety guards.

Pure functions with no database access; the services layer feeds them
loaded accounts and counts.
"""

from studybuddy_api.lib.moderation.actor import AdminActor
from studybuddy_api.lib.moderation.errors import InvalidOperationError, ModerationError, NotFoundError
from studybuddy_api.lib.moderation.guards import (
    ensure_not_last_admin,
    ensure_not_self,
    ensure_not_self_demotion,
    is_admin_demotion,
    require_reason,
)
from studybuddy_api.lib.moderation.status import (
    AccountStatus,
    as_utc,
    can_login,
    describe_status,
    is_banned,
    is_suspended,
)

__all__ = [
    "AccountStatus",
    "AdminActor",
    "InvalidOperationError",
    "ModerationError",
    "NotFoundError",
    "as_utc",
    "can_login",
    "describe_status",
    "ensure_not_last_admin",
    "ensure_not_self",
    "ensure_not_self_demotion",
    "is_admin_demotion",
    "is_banned",
    "is_suspended",
    "require_reason",
]

# core/services/activity.py
from core.models import ActivityLog


def log_activity(user, action: str, details: str | None = None) -> ActivityLog:
    # System sweeps and anonymous callers are logged without a user.
    if user is not None and not getattr(user, "is_authenticated", False):
        user = None
    return ActivityLog.objects.create(user=user, action=action, details=details)

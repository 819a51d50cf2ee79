"""
Activity feed entries for session-based services. Call on every create, update and delete.
"""

from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from playgroup.core.models import Activity


def log_activity(
    db: AsyncSession,
    type: str,
    action: str,
    details: Optional[Dict[str, Any]] = None,
) -> None:
    """Append one activity entry. Caller must commit."""
    db.add(Activity(type=type, action=action, details=details or {}))

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from playgroup.core.models import Activity

from .schemas import ActivityResponse


async def list_activities(
    db: AsyncSession,
    limit: Optional[int] = None,
    type_filter: Optional[str] = None,
) -> List[ActivityResponse]:
    """Newest first."""
    stmt = select(Activity)
    if type_filter:
        stmt = stmt.where(Activity.type == type_filter)
    stmt = stmt.order_by(Activity.timestamp.desc(), Activity.id.desc())
    if limit is not None:
        stmt = stmt.limit(limit)
    result = await db.execute(stmt)
    return [ActivityResponse.model_validate(a) for a in result.scalars().all()]

from datetime import datetime
from typing import Any, Dict

from playgroup.core.schemas import CamelModel


class ActivityResponse(CamelModel):
    id: int
    type: str
    action: str
    details: Dict[str, Any]
    timestamp: datetime

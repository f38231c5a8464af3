"""Row-change events published after every committed write"""

from typing import Any, Literal

from pydantic import BaseModel

EventType = Literal["insert", "update", "delete"]

TABLES = ("bookings", "labs", "tests", "partner_applications", "user_roles")


class ChangeEvent(BaseModel):
    """One row-level change on one table"""

    table: str
    type: EventType
    record: dict[str, Any]

    @property
    def record_id(self) -> Any:
        return self.record.get("id")

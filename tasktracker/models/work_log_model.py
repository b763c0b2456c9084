from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from tasktracker.utils.time_interval import compute_hours, format_hours


@dataclass
class WorkLog:
    date: str  # YYYY-MM-DD
    start_time: str  # HH:MM (24h)
    end_time: str  # HH:MM (24h), may be earlier than start_time for overnight shifts
    description: str
    user_id: str
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)
    id: Optional[str] = None

    @property
    def hours(self):
        return compute_hours(self.start_time, self.end_time)

    @classmethod
    def from_doc(cls, doc):
        return cls(
            id=str(doc["_id"]),
            date=doc["date"],
            start_time=doc["start_time"],
            end_time=doc["end_time"],
            description=doc["description"],
            user_id=doc["user_id"],
            created_at=doc["created_at"],
            updated_at=doc["updated_at"],
        )

    def to_doc(self):
        return {
            "date": self.date,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "description": self.description,
            "user_id": self.user_id,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    def to_json(self):
        hours = self.hours
        return {
            "id": self.id,
            "date": self.date,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "description": self.description,
            "hours": hours,
            "hours_formatted": format_hours(hours),
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

import logging
from datetime import datetime

from pymongo import DESCENDING

from tasktracker.errors import ValidationError
from tasktracker.models.work_log_model import WorkLog
from tasktracker.services.watch import Watch, owner_pipeline
from tasktracker.utils import time_interval
from tasktracker.utils.db import mongo_errors, to_object_id

logger = logging.getLogger(__name__)

WORK_LOGS_COLLECTION = "work_logs"

LOG_ORDER = [("date", DESCENDING), ("start_time", DESCENDING)]


class WorkLogStore:
    """Work-hours entries. Entries are only ever created or deleted.

    ``add`` does not check that ``start_time`` precedes ``end_time``: an
    earlier end is an overnight shift, and any stricter rule belongs to the
    caller.
    """

    def __init__(self, db):
        self.collection = db[WORK_LOGS_COLLECTION]

    def add(self, date, start_time, end_time, description, owner_id):
        for field, value in (("date", date), ("start_time", start_time), ("end_time", end_time)):
            if not value:
                raise ValidationError(f"{field} is required")
        if description is not None and not isinstance(description, str):
            raise ValidationError("Description must be a string")
        description = (description or "").strip()
        if not description:
            raise ValidationError("Description is required")

        now = datetime.utcnow()
        log = WorkLog(
            date=date,
            start_time=start_time,
            end_time=end_time,
            description=description,
            user_id=owner_id,
            created_at=now,
            updated_at=now,
        )
        with mongo_errors("Adding work log"):
            res = self.collection.insert_one(log.to_doc())
        logger.debug("Added work log %s for %s", res.inserted_id, owner_id)
        return str(res.inserted_id)

    def delete(self, log_id, owner_id=None):
        query = {"_id": to_object_id(log_id)}
        if owner_id is not None:
            query["user_id"] = owner_id
        with mongo_errors("Deleting work log"):
            res = self.collection.delete_one(query)
        return res.deleted_count > 0

    def list(self, owner_id):
        with mongo_errors("Listing work logs"):
            cursor = self.collection.find({"user_id": owner_id}).sort(LOG_ORDER)
            return [WorkLog.from_doc(doc) for doc in cursor]

    def subscribe(self, owner_id, on_change):
        watch = Watch(
            self.collection,
            owner_pipeline(owner_id),
            lambda: self.list(owner_id),
            on_change,
            name=f"work-logs-watch:{owner_id}",
        )
        return watch.start()

    @staticmethod
    def total_hours(logs):
        return time_interval.total_hours(logs)

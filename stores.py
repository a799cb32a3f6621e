"""
Problem and Result stores backed by MongoDB collections.

The stores own identifier assignment and timestamping. Every operation either
returns its result or raises one of ValidationError, NotFoundError, StoreError.
"""
import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pydantic import ValidationError as SchemaError
from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from errors import NotFoundError, StoreError, ValidationError
from schemas import Problem, Result

logger = logging.getLogger("quiz.stores")

READ_ONLY_FIELDS = {"_id", "id", "createdAt", "updatedAt"}


def utcnow() -> datetime:
    # BSON dates keep milliseconds only
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


@contextmanager
def store_errors(message: str):
    """Turn driver failures into a StoreError carrying a generic message."""
    try:
        yield
    except (PyMongoError, InvalidId, OverflowError) as e:
        logger.error("%s: %s", message, e, exc_info=True)
        raise StoreError(message) from e


def serialize(doc: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(doc)
    out["id"] = str(out.pop("_id"))
    return out


def drop_none(doc: Dict[str, Any]) -> Dict[str, Any]:
    # top level only; None inside wrongAnswers entries is kept
    return {k: v for k, v in doc.items() if v is not None}


def is_blank(value: Any) -> bool:
    return value is None or value == ""


def build_filter(**fields: Optional[str]) -> Dict[str, Any]:
    """Conjunction of equality clauses for the fields actually supplied."""
    return {k: v for k, v in fields.items() if not is_blank(v)}


class ProblemStore:
    def __init__(self, col: Collection, clock: Callable[[], datetime] = utcnow):
        self.col = col
        self.clock = clock

    def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        if any(is_blank(data.get(f)) for f in ("mainCategory", "subCategory", "problem")):
            raise ValidationError("mainCategory, subCategory, and problem are required.")
        try:
            doc = drop_none(Problem.model_validate(data).model_dump())
        except SchemaError as e:
            raise ValidationError(f"Invalid problem: {e.errors()[0]['msg']}") from e
        now = self.clock()
        doc["createdAt"] = now
        doc["updatedAt"] = now
        with store_errors("Error saving problem"):
            res = self.col.insert_one(doc)
            stored = self.col.find_one({"_id": res.inserted_id})
        return serialize(stored)

    def list_all(self) -> List[Dict[str, Any]]:
        with store_errors("Error fetching problems"):
            cursor = self.col.find().sort([("mainCategory", ASCENDING), ("subCategory", ASCENDING)])
            return [serialize(d) for d in cursor]

    def update_by_id(self, problem_id: str, patch: Dict[str, Any]) -> Dict[str, Any]:
        # Required fields are not re-checked here; a patch may blank one.
        changes = {k: v for k, v in patch.items() if k in Problem.model_fields and k not in READ_ONLY_FIELDS}
        changes["updatedAt"] = self.clock()
        with store_errors("Error updating problem"):
            doc = self.col.find_one_and_update(
                {"_id": ObjectId(problem_id)},
                {"$set": changes},
                return_document=ReturnDocument.AFTER,
            )
        if doc is None:
            raise NotFoundError("Problem not found.")
        return serialize(doc)

    def delete_by_id(self, problem_id: str) -> Dict[str, Any]:
        with store_errors("Error deleting problem"):
            res = self.col.delete_one({"_id": ObjectId(problem_id)})
        if res.deleted_count == 0:
            raise NotFoundError("Problem not found.")
        return {"message": "Problem deleted successfully."}

    def delete_all(self) -> Dict[str, Any]:
        with store_errors("Error deleting all problems"):
            res = self.col.delete_many({})
        logger.warning("Deleted all problems (%d)", res.deleted_count)
        return {"message": "All problems deleted successfully.", "deletedCount": res.deleted_count}


class ResultStore:
    def __init__(self, col: Collection, clock: Callable[[], datetime] = utcnow):
        self.col = col
        self.clock = clock

    def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        if any(is_blank(data.get(f)) for f in ("user", "mainCategory", "subCategory")) or data.get("score") is None:
            raise ValidationError("Required result fields missing.")
        try:
            doc = drop_none(Result.model_validate(data).model_dump())
        except SchemaError as e:
            raise ValidationError(f"Invalid result: {e.errors()[0]['msg']}") from e
        now = self.clock()
        doc["createdAt"] = now
        doc["updatedAt"] = now
        with store_errors("Error saving result"):
            res = self.col.insert_one(doc)
            stored = self.col.find_one({"_id": res.inserted_id})
        return serialize(stored)

    def list(self, user: Optional[str] = None, mainCategory: Optional[str] = None,
             subCategory: Optional[str] = None) -> List[Dict[str, Any]]:
        query = build_filter(user=user, mainCategory=mainCategory, subCategory=subCategory)
        with store_errors("Error fetching results"):
            cursor = self.col.find(query).sort([("createdAt", DESCENDING), ("_id", DESCENDING)])
            return [serialize(d) for d in cursor]

    def delete_all(self) -> Dict[str, Any]:
        with store_errors("Error deleting all results"):
            res = self.col.delete_many({})
        logger.warning("Deleted all results (%d)", res.deleted_count)
        return {"message": "All results deleted successfully.", "deletedCount": res.deleted_count}

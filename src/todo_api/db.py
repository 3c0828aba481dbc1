from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence

from bson import ObjectId
from pymongo import MongoClient, ReturnDocument
from pymongo.collection import Collection

from .models import TodoEntity, TodoFields, TodoStatus
from .repositories import Repository
from .settings import Settings


@dataclass(frozen=True)
class _Fields:
    id: str = "_id"
    description: str = "description"
    status: str = "status"


_F = _Fields()


class MongoRepository(Repository):
    """
    Repository backed by a single MongoDB collection via pymongo.
    """

    def __init__(self, collection: Collection) -> None:
        self._collection = collection

    @classmethod
    def from_settings(cls, settings: Settings) -> "MongoRepository":
        client: MongoClient = MongoClient(settings.mongodb_uri)
        return cls(client[settings.mongodb_database][settings.mongodb_collection])

    def _doc_to_entity(self, doc: Mapping[str, Any]) -> TodoEntity:
        return {
            "id": str(doc[_F.id]),
            "description": doc.get(_F.description, ""),
            "status": doc.get(_F.status, TodoStatus.PENDING.value),
        }

    def _new_doc(self, fields: TodoFields) -> Dict[str, Any]:
        return {
            _F.description: fields["description"],
            _F.status: fields.get("status") or TodoStatus.PENDING.value,
        }

    def find_all(self) -> List[TodoEntity]:
        return [self._doc_to_entity(d) for d in self._collection.find({})]

    def find_by_id(self, todo_id: str) -> Optional[TodoEntity]:
        doc = self._collection.find_one({_F.id: ObjectId(todo_id)})
        return self._doc_to_entity(doc) if doc else None

    def find_by_status(self, status: str) -> List[TodoEntity]:
        return [self._doc_to_entity(d) for d in self._collection.find({_F.status: status})]

    def insert(self, fields: TodoFields) -> TodoEntity:
        doc = self._new_doc(fields)
        result = self._collection.insert_one(doc)
        doc[_F.id] = result.inserted_id
        return self._doc_to_entity(doc)

    def insert_many(self, rows: Sequence[TodoFields]) -> List[TodoEntity]:
        if not rows:
            # pymongo refuses an empty batch
            return []
        docs = [self._new_doc(r) for r in rows]
        result = self._collection.insert_many(docs, ordered=True)
        for doc, inserted_id in zip(docs, result.inserted_ids):
            doc[_F.id] = inserted_id
        return [self._doc_to_entity(d) for d in docs]

    def update(self, todo_id: str, patch: TodoFields) -> Optional[TodoEntity]:
        query = {_F.id: ObjectId(todo_id)}
        if not patch:
            # MongoDB rejects an empty $set; an empty patch only has to confirm existence
            doc = self._collection.find_one(query)
        else:
            doc = self._collection.find_one_and_update(
                query, {"$set": dict(patch)}, return_document=ReturnDocument.AFTER
            )
        return self._doc_to_entity(doc) if doc else None

    def delete(self, todo_id: str) -> bool:
        result = self._collection.delete_one({_F.id: ObjectId(todo_id)})
        return result.deleted_count > 0

    def export_rows(self) -> List[TodoFields]:
        projection = {_F.id: 0, _F.description: 1, _F.status: 1}
        return [
            {
                "description": d.get(_F.description, ""),
                "status": d.get(_F.status, TodoStatus.PENDING.value),
            }
            for d in self._collection.find({}, projection)
        ]

from unittest.mock import MagicMock

from bson import ObjectId
from pymongo import ReturnDocument

from src.todo_api.db import MongoRepository


def make_repo():
    collection = MagicMock()
    return MongoRepository(collection), collection


class TestMongoRepository:
    def test_find_all_maps_object_ids_to_strings(self):
        repo, collection = make_repo()
        oid = ObjectId()
        collection.find.return_value = [{"_id": oid, "description": "Buy milk", "status": "pending"}]
        assert repo.find_all() == [{"id": str(oid), "description": "Buy milk", "status": "pending"}]
        collection.find.assert_called_once_with({})

    def test_find_by_id_queries_object_id(self):
        repo, collection = make_repo()
        oid = ObjectId()
        collection.find_one.return_value = None
        assert repo.find_by_id(str(oid)) is None
        collection.find_one.assert_called_once_with({"_id": oid})

    def test_find_by_status_is_exact_match(self):
        repo, collection = make_repo()
        collection.find.return_value = []
        assert repo.find_by_status("archived") == []
        collection.find.assert_called_once_with({"status": "archived"})

    def test_insert_defaults_status(self):
        repo, collection = make_repo()
        oid = ObjectId()
        collection.insert_one.return_value.inserted_id = oid
        created = repo.insert({"description": "Buy milk"})
        assert created == {"id": str(oid), "description": "Buy milk", "status": "pending"}
        collection.insert_one.assert_called_once()

    def test_insert_many_is_one_batch(self):
        repo, collection = make_repo()
        oids = [ObjectId(), ObjectId()]
        collection.insert_many.return_value.inserted_ids = oids
        created = repo.insert_many(
            [{"description": "a", "status": "completed"}, {"description": "b", "status": "pending"}]
        )
        assert [t["id"] for t in created] == [str(o) for o in oids]
        assert [t["status"] for t in created] == ["completed", "pending"]
        collection.insert_many.assert_called_once()

    def test_insert_many_skips_empty_batch(self):
        repo, collection = make_repo()
        assert repo.insert_many([]) == []
        collection.insert_many.assert_not_called()

    def test_update_sets_only_patch_fields(self):
        repo, collection = make_repo()
        oid = ObjectId()
        collection.find_one_and_update.return_value = {
            "_id": oid,
            "description": "Buy milk",
            "status": "completed",
        }
        updated = repo.update(str(oid), {"status": "completed"})
        assert updated == {"id": str(oid), "description": "Buy milk", "status": "completed"}
        collection.find_one_and_update.assert_called_once_with(
            {"_id": oid}, {"$set": {"status": "completed"}}, return_document=ReturnDocument.AFTER
        )

    def test_update_with_empty_patch_only_reads(self):
        repo, collection = make_repo()
        oid = ObjectId()
        collection.find_one.return_value = None
        assert repo.update(str(oid), {}) is None
        collection.find_one_and_update.assert_not_called()

    def test_delete_reports_whether_a_document_was_removed(self):
        repo, collection = make_repo()
        collection.delete_one.return_value.deleted_count = 0
        assert repo.delete(str(ObjectId())) is False
        collection.delete_one.return_value.deleted_count = 1
        assert repo.delete(str(ObjectId())) is True

    def test_export_rows_projects_description_and_status(self):
        repo, collection = make_repo()
        collection.find.return_value = [{"description": "Buy milk", "status": "pending"}]
        assert repo.export_rows() == [{"description": "Buy milk", "status": "pending"}]
        collection.find.assert_called_once_with({}, {"_id": 0, "description": 1, "status": 1})

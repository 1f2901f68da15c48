##############################################################################
# Copyright (c) MDDB Project developers. See top-level LICENSE and COPYRIGHT
# files for dates and other details. No copyright assignment is required to
# contribute to MDDB.
##############################################################################

"""
Utility functions for our test suite.

mongomock has no GridFS support, so `create_bucket` builds a mocked
`GridFSBucket` that stores files in the `fs.files`/`fs.chunks` collections of
a mongomock database, the same way the real bucket lays them out.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List
from unittest.mock import MagicMock

from bson import ObjectId
from gridfs import GridFSBucket
from gridfs.errors import NoFile
from pymongo.database import Database as MongoDatabase


DEFAULT_CHUNK_SIZE = 4 * 1024 * 1024


def store_file(
    db: MongoDatabase, file_id: Any, filename: str, data: bytes, metadata: Dict = None, chunk_size: int = None
):
    """
    Write a file document and its chunks.

    :param db: The mongomock database
    :param file_id: The `_id` of the new file
    :param filename: The name of the new file
    :param data: The file content
    :param metadata: The file metadata
    :param chunk_size: The size of each chunk
    """
    chunk_size = chunk_size or DEFAULT_CHUNK_SIZE
    db["fs.files"].insert_one(
        {
            "_id": file_id,
            "filename": filename,
            "length": len(data),
            "chunkSize": chunk_size,
            "uploadDate": datetime.now(timezone.utc),
            "metadata": metadata,
        }
    )
    for n, start in enumerate(range(0, len(data), chunk_size)):
        db["fs.chunks"].insert_one({"files_id": file_id, "n": n, "data": data[start : start + chunk_size]})


class FakeGridIn:
    """
    Upload stream returned by the mocked `open_upload_stream`.
    Nothing is stored until `close` is called.
    """

    def __init__(self, db: MongoDatabase, filename: str, metadata: Dict = None, chunk_size: int = None):
        self._id = ObjectId()
        self.db = db
        self.filename = filename
        self.metadata = metadata
        self.chunk_size = chunk_size
        self.buffer = bytearray()
        self.closed = False
        self.aborted = False

    @property
    def length(self) -> int:
        return len(self.buffer)

    def write(self, data: bytes):
        self.buffer.extend(data)

    def close(self):
        store_file(self.db, self._id, self.filename, bytes(self.buffer), self.metadata, self.chunk_size)
        self.closed = True

    def abort(self):
        self.aborted = True


def create_bucket(db: MongoDatabase, chunk_size: int = None) -> MagicMock:
    """
    Create a mocked `GridFSBucket` backed by a mongomock database.

    The `streams` attribute of the mock lists every upload stream it opened.

    :param db: The mongomock database
    :param chunk_size: The size of each chunk
    :returns: The mocked bucket
    """
    bucket = MagicMock(spec=GridFSBucket)
    streams: List[FakeGridIn] = []
    bucket.streams = streams

    def upload_from_stream(filename, source, chunk_size_bytes=None, metadata=None, **kwargs):
        file_id = ObjectId()
        store_file(db, file_id, filename, source.read(), metadata, chunk_size_bytes or chunk_size)
        return file_id

    def open_upload_stream(filename, chunk_size_bytes=None, metadata=None, **kwargs):
        stream = FakeGridIn(db, filename, metadata, chunk_size_bytes or chunk_size)
        streams.append(stream)
        return stream

    def delete(file_id, **kwargs):
        db["fs.chunks"].delete_many({"files_id": file_id})
        if db["fs.files"].delete_one({"_id": file_id}).deleted_count == 0:
            raise NoFile(f"no file could be deleted because none matched {file_id}")

    def rename(file_id, new_filename, **kwargs):
        if db["fs.files"].update_one({"_id": file_id}, {"$set": {"filename": new_filename}}).matched_count == 0:
            raise NoFile(f"no files could be renamed {file_id} because none matched file_id {file_id}")

    bucket.upload_from_stream.side_effect = upload_from_stream
    bucket.open_upload_stream.side_effect = open_upload_stream
    bucket.delete.side_effect = delete
    bucket.rename.side_effect = rename
    return bucket

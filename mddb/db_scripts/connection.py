##############################################################################
# Copyright (c) MDDB Project developers. See top-level LICENSE and COPYRIGHT
# files for dates and other details. No copyright assignment is required to
# contribute to MDDB.
##############################################################################

"""
Construction of the MongoDB client, database and GridFS bucket from the
application configuration.
"""

import logging
from types import SimpleNamespace
from typing import Tuple
from urllib.parse import quote

from gridfs import GridFSBucket
from pymongo import MongoClient
from pymongo.database import Database as MongoDatabase

from mddb.db_scripts.collections import BUCKET_NAME


LOG = logging.getLogger("mddb")


def get_connection_string(mongo_config: SimpleNamespace, include_password: bool = False) -> str:
    """
    Build the connection string of the MongoDB server.

    Args:
        mongo_config: The `mongo` section of the configuration.
        include_password: If False, the password is masked.

    Returns:
        The connection string.
    """
    if mongo_config.url:
        return mongo_config.url
    credentials = ""
    if mongo_config.username:
        username = quote(str(mongo_config.username), safe="")
        password = "******"
        if include_password and mongo_config.password:
            password = quote(str(mongo_config.password), safe="")
        credentials = f"{username}:{password}@" if mongo_config.password else f"{username}@"
    return f"mongodb://{credentials}{mongo_config.host}:{mongo_config.port}/{mongo_config.auth_source}"


def get_database_handles(config) -> Tuple[MongoDatabase, GridFSBucket]:
    """
    Connect to MongoDB and build the database and bucket handles.

    Args:
        config (config.Config): The application configuration.

    Returns:
        The pymongo database and the GridFS bucket of the binary files.
    """
    mongo_config = config.mongo
    LOG.debug(f"Connecting to {get_connection_string(mongo_config)}")
    client = MongoClient(host=get_connection_string(mongo_config, include_password=True), tz_aware=True)
    database = client[mongo_config.database]
    bucket = GridFSBucket(
        database,
        bucket_name=BUCKET_NAME,
        chunk_size_bytes=mongo_config.chunk_size_bytes,
    )
    return database, bucket

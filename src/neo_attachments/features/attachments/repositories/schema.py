"""Creates the attachment tables when they do not exist yet."""

import logging

from ..utils.queries import (
    ATTACHMENTS_CREATE_INDEXES,
    ATTACHMENTS_CREATE_TABLE,
    STORAGE_USAGE_CREATE_TABLE,
)

logger = logging.getLogger(__name__)


class AttachmentSchemaManager:
    """Idempotent DDL bootstrap for the attachments feature."""

    def __init__(self, database_repository, schema: str = "public"):
        self._db = database_repository
        self._schema = schema

    async def ensure_schema(self) -> None:
        async with self._db.transaction() as connection:
            await connection.execute(f"CREATE SCHEMA IF NOT EXISTS {self._schema}")
            await connection.execute(ATTACHMENTS_CREATE_TABLE.format(schema=self._schema))
            for statement in ATTACHMENTS_CREATE_INDEXES:
                await connection.execute(statement.format(schema=self._schema))
            await connection.execute(STORAGE_USAGE_CREATE_TABLE.format(schema=self._schema))
        logger.info(f"Attachment tables ready in schema '{self._schema}'")

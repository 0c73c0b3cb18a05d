"""Attachment and storage-ledger SQL query constants.

All queries are parameterized by schema and use asyncpg positional
parameters. Record transitions are conditional updates on the expected prior
status so concurrent callers cannot apply the same transition twice.
"""

# ============================================================================
# SCHEMA
# ============================================================================

ATTACHMENTS_CREATE_TABLE = """
    CREATE TABLE IF NOT EXISTS {schema}.attachments (
        id UUID PRIMARY KEY,
        organization_id UUID NOT NULL,
        workspace_id UUID NOT NULL,
        uploader_user_id UUID NOT NULL,
        parent_type VARCHAR(50) NOT NULL,
        parent_id TEXT NOT NULL,
        file_name VARCHAR(255) NOT NULL,
        mime_type VARCHAR(255) NOT NULL DEFAULT 'application/octet-stream',
        size_bytes BIGINT NOT NULL CHECK (size_bytes > 0),
        storage_provider VARCHAR(20) NOT NULL DEFAULT 's3',
        bucket VARCHAR(255) NOT NULL,
        storage_key TEXT NOT NULL,
        checksum_sha256 VARCHAR(64),
        status VARCHAR(20) NOT NULL DEFAULT 'pending'
            CHECK (status IN ('pending', 'uploaded', 'deleted')),
        uploaded_at TIMESTAMPTZ,
        retention_days INTEGER CHECK (retention_days BETWEEN 1 AND 3650),
        expires_at TIMESTAMPTZ,
        last_downloaded_at TIMESTAMPTZ,
        deleted_at TIMESTAMPTZ,
        created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
        updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
    )
"""

ATTACHMENTS_CREATE_INDEXES = [
    "CREATE UNIQUE INDEX IF NOT EXISTS idx_attachments_storage_key ON {schema}.attachments (storage_key)",
    """CREATE INDEX IF NOT EXISTS idx_attachments_parent
        ON {schema}.attachments (organization_id, workspace_id, parent_type, parent_id)""",
    """CREATE INDEX IF NOT EXISTS idx_attachments_expiry
        ON {schema}.attachments (expires_at) WHERE status = 'uploaded'""",
    """CREATE INDEX IF NOT EXISTS idx_attachments_pending_created
        ON {schema}.attachments (created_at) WHERE status = 'pending'""",
]

STORAGE_USAGE_CREATE_TABLE = """
    CREATE TABLE IF NOT EXISTS {schema}.workspace_storage_usage (
        organization_id UUID NOT NULL,
        workspace_id UUID NOT NULL,
        used_bytes BIGINT NOT NULL DEFAULT 0 CHECK (used_bytes >= 0),
        reserved_bytes BIGINT NOT NULL DEFAULT 0 CHECK (reserved_bytes >= 0),
        updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
        PRIMARY KEY (organization_id, workspace_id)
    )
"""

# ============================================================================
# ATTACHMENT QUERIES
# ============================================================================

ATTACHMENT_INSERT = """
    INSERT INTO {schema}.attachments (
        id, organization_id, workspace_id, uploader_user_id, parent_type, parent_id,
        file_name, mime_type, size_bytes, storage_provider, bucket, storage_key,
        checksum_sha256, status, created_at, updated_at
    ) VALUES (
        $1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12, $13, $14, $15, $16
    ) RETURNING *
"""

ATTACHMENT_GET_ACTIVE = """
    SELECT * FROM {schema}.attachments
    WHERE id = $1 AND organization_id = $2 AND workspace_id = $3 AND deleted_at IS NULL
"""

ATTACHMENT_MARK_UPLOADED = """
    UPDATE {schema}.attachments SET
        status = 'uploaded',
        uploaded_at = $2,
        checksum_sha256 = COALESCE($3, checksum_sha256),
        retention_days = $4,
        expires_at = $5,
        updated_at = $2
    WHERE id = $1 AND status = 'pending' AND deleted_at IS NULL
    RETURNING *
"""

ATTACHMENT_MARK_DELETED = """
    UPDATE {schema}.attachments SET
        status = 'deleted',
        deleted_at = $3,
        updated_at = $3
    WHERE id = $1 AND status = $2 AND deleted_at IS NULL
    RETURNING *
"""

ATTACHMENT_MARK_EXPIRED_DELETED = """
    UPDATE {schema}.attachments SET
        status = 'deleted',
        deleted_at = $3,
        updated_at = $3
    WHERE id = $1 AND status = $2 AND deleted_at IS NULL
      AND expires_at IS NOT NULL AND expires_at < $4
    RETURNING *
"""

ATTACHMENT_UPDATE_RETENTION = """
    UPDATE {schema}.attachments SET
        retention_days = $2,
        expires_at = $3,
        updated_at = now()
    WHERE id = $1 AND status = 'uploaded' AND deleted_at IS NULL
    RETURNING *
"""

ATTACHMENT_TOUCH_LAST_DOWNLOADED = """
    UPDATE {schema}.attachments SET last_downloaded_at = $2
    WHERE id = $1
"""

ATTACHMENT_LIST_FOR_PARENT = """
    SELECT * FROM {schema}.attachments
    WHERE organization_id = $1 AND workspace_id = $2
      AND parent_type = $3 AND parent_id = $4
      AND status = 'uploaded' AND deleted_at IS NULL
    ORDER BY uploaded_at DESC
"""

ATTACHMENT_LIST_EXPIRED = """
    SELECT * FROM {schema}.attachments
    WHERE status = 'uploaded' AND deleted_at IS NULL
      AND expires_at IS NOT NULL AND expires_at < $1
    ORDER BY expires_at ASC
    LIMIT $2
"""

ATTACHMENT_LIST_STALE_PENDING = """
    SELECT * FROM {schema}.attachments
    WHERE status = 'pending' AND deleted_at IS NULL AND created_at < $1
    ORDER BY created_at ASC
    LIMIT $2
"""

ATTACHMENT_SUM_BY_WORKSPACE = """
    SELECT workspace_id,
           COALESCE(SUM(size_bytes) FILTER (WHERE status = 'uploaded'), 0) AS uploaded_bytes,
           COALESCE(SUM(size_bytes) FILTER (WHERE status = 'pending'), 0) AS pending_bytes
    FROM {schema}.attachments
    WHERE organization_id = $1 AND deleted_at IS NULL
    GROUP BY workspace_id
"""

# ============================================================================
# STORAGE LEDGER QUERIES
# ============================================================================

STORAGE_RESERVE = """
    INSERT INTO {schema}.workspace_storage_usage (organization_id, workspace_id, used_bytes, reserved_bytes)
    VALUES ($1, $2, 0, $3)
    ON CONFLICT (organization_id, workspace_id) DO UPDATE SET
        reserved_bytes = {schema}.workspace_storage_usage.reserved_bytes + $3,
        updated_at = now()
"""

STORAGE_PROMOTE = """
    UPDATE {schema}.workspace_storage_usage SET
        reserved_bytes = GREATEST(0, reserved_bytes - $3),
        used_bytes = used_bytes + $3,
        updated_at = now()
    WHERE organization_id = $1 AND workspace_id = $2
"""

STORAGE_RELEASE = """
    UPDATE {schema}.workspace_storage_usage SET
        reserved_bytes = GREATEST(0, reserved_bytes - $3),
        updated_at = now()
    WHERE organization_id = $1 AND workspace_id = $2
"""

STORAGE_DECREMENT_USED = """
    UPDATE {schema}.workspace_storage_usage SET
        used_bytes = GREATEST(0, used_bytes - $3),
        updated_at = now()
    WHERE organization_id = $1 AND workspace_id = $2
"""

STORAGE_EFFECTIVE_USAGE = """
    SELECT COALESCE(SUM(used_bytes + reserved_bytes), 0)
    FROM {schema}.workspace_storage_usage
    WHERE organization_id = $1
"""

STORAGE_USED_BYTES = """
    SELECT COALESCE(SUM(used_bytes), 0)
    FROM {schema}.workspace_storage_usage
    WHERE organization_id = $1
"""

STORAGE_GET_USAGE = """
    SELECT * FROM {schema}.workspace_storage_usage
    WHERE organization_id = $1 AND workspace_id = $2
"""

STORAGE_LIST_FOR_ORGANIZATION = """
    SELECT * FROM {schema}.workspace_storage_usage
    WHERE organization_id = $1
    ORDER BY workspace_id
"""

"""Utility functions for Alembic migrations."""
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID
from alembic import op


def get_uuid_type():
    """UUID column type for the current dialect.

    PostgreSQL gets its native UUID; other dialects store the hex form in
    String(36), matching ``tapvote.models.base.AdaptiveUUID``.
    """
    bind = op.get_bind()
    if bind.dialect.name == 'postgresql':
        return UUID(as_uuid=True)
    return sa.String(length=36)


def get_timestamp_default():
    """Server default for timestamp columns: NOW() on PostgreSQL, CURRENT_TIMESTAMP elsewhere."""
    bind = op.get_bind()
    if bind.dialect.name == 'postgresql':
        return sa.text('NOW()')
    return sa.text('CURRENT_TIMESTAMP')

"""initial

Revision ID: 0001
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "uploads",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("file_name", sa.String(length=255), nullable=False),
        sa.Column("upload_date", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_uploads_id", "uploads", ["id"])
    op.create_index("ix_uploads_upload_date", "uploads", ["upload_date"])

    op.create_table(
        "call_records",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "upload_id",
            sa.Integer(),
            sa.ForeignKey("uploads.id", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column("call_date", sa.DateTime(), nullable=False),
        sa.Column("caller", sa.String(length=20), nullable=False),
        sa.Column("receiver", sa.String(length=20), nullable=False),
        sa.Column("duration", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("result", sa.String(length=50), nullable=False, server_default=""),
        sa.Column("cost", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("service", sa.String(length=255), nullable=False, server_default=""),
    )
    op.create_index("ix_call_records_id", "call_records", ["id"])
    op.create_index("ix_call_records_upload_id", "call_records", ["upload_id"])
    op.create_index("ix_call_records_caller", "call_records", ["caller"])


def downgrade() -> None:
    op.drop_index("ix_call_records_caller", table_name="call_records")
    op.drop_index("ix_call_records_upload_id", table_name="call_records")
    op.drop_index("ix_call_records_id", table_name="call_records")
    op.drop_table("call_records")
    op.drop_index("ix_uploads_upload_date", table_name="uploads")
    op.drop_index("ix_uploads_id", table_name="uploads")
    op.drop_table("uploads")

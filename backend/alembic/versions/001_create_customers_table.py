"""Create customers table

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates the `customers` table, the collection behind /api/customers.
How:   PostgreSQL UUID primary key generated server-side, TIMESTAMP WITH TIME ZONE.
       No indexes beyond the primary key.

Rollback: downgrade() drops the table entirely (destructive — all data lost).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the customers table. Column docs live in customer_api/models/customer.py."""
    op.create_table(
        "customers",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
            comment="Store-assigned identifier, immutable once created",
        ),
        sa.Column("name", sa.String(255), nullable=False, comment="Customer display name"),
        sa.Column("email", sa.String(320), nullable=True, comment="Contact e-mail address"),
        sa.Column("description", sa.Text(), nullable=True, comment="Free-form notes about the customer"),
        sa.Column(
            "loyalty_points",
            sa.Integer(),
            nullable=False,
            server_default=sa.text("0"),
            comment="Accumulated loyalty points",
        ),
        sa.Column("birth_date", sa.Date(), nullable=True, comment="Date of birth"),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
            comment="When this customer was created (UTC)",
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            nullable=True,
            comment="When this customer was last updated (UTC)",
        ),
        sa.PrimaryKeyConstraint("id"),
    )


def downgrade() -> None:
    """Drop the customers table. All customer data is permanently lost."""
    op.drop_table("customers")

"""Initial schema: users, books, book images and petitions.

Revision ID: 001_initial
Revises: 
Create Date: 2026-10-17

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Users are owned by the auth service; the listing core only reads them
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('location', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )

    op.create_table(
        'books',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('owner_id', sa.Integer(), nullable=False),
        sa.Column('isbn', sa.String(20), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('course', sa.String(100), nullable=True),
        sa.Column('editorial', sa.String(255), nullable=True),
        sa.Column('edition_year', sa.Integer(), nullable=True),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('detail', sa.Text(), nullable=True),
        sa.Column('activation_code', sa.String(40), nullable=True),
        sa.Column('activated', sa.Boolean(), nullable=False, default=False),
        sa.Column('available', sa.Boolean(), nullable=False, default=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['owner_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('activation_code'),
    )

    op.create_table(
        'book_images',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('book_id', sa.Integer(), nullable=False),
        sa.Column('locator', sa.String(64), nullable=False),
        sa.Column('is_primary', sa.Boolean(), nullable=False, default=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['book_id'], ['books.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('locator'),
    )

    op.create_table(
        'petitions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('isbn', sa.String(20), nullable=False),
        sa.Column('level', sa.Integer(), nullable=False, default=0),
        sa.Column('active', sa.Boolean(), nullable=False, default=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'isbn', name='uq_petitions_user_id_isbn'),
    )

    # Create indexes for performance
    op.create_index('ix_books_owner_id', 'books', ['owner_id'])
    op.create_index('ix_books_isbn', 'books', ['isbn'])
    op.create_index('ix_book_images_book_id', 'book_images', ['book_id'])
    op.create_index('ix_petitions_isbn', 'petitions', ['isbn'])


def downgrade() -> None:
    op.drop_table('petitions')
    op.drop_table('book_images')
    op.drop_table('books')
    op.drop_table('users')

"""initial schema

Revision ID: 5a1c9e7d2b04
Revises:
Create Date: 2026-10-18 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '5a1c9e7d2b04'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade():
    op.create_table(
        "user",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("password", sa.String(), nullable=False),
        sa.Column("role", sa.String(), nullable=False, server_default="community"),
        sa.Column("avatar", sa.String(), nullable=True),
        sa.Column("bio", sa.String(), nullable=True),
        sa.Column("location", sa.String(), nullable=True),
        sa.Column("phone", sa.String(), nullable=True),
        sa.Column("instagram", sa.String(), nullable=True),
        sa.Column("website", sa.String(), nullable=True),
        sa.Column("facebook", sa.String(), nullable=True),
        sa.Column("verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("specializations", sa.String(), nullable=True),
        sa.Column("total_sales", sa.Float(), nullable=False, server_default="0"),
        sa.Column("rating", sa.Float(), nullable=False, server_default="0"),
        sa.Column("total_ratings", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("last_login", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_user_email", "user", ["email"], unique=True)
    op.create_index("ix_user_role", "user", ["role"])
    op.create_index("ix_user_verified", "user", ["verified"])

    op.create_table(
        "artwork",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=False),
        sa.Column("price", sa.Float(), nullable=False),
        sa.Column("category", sa.String(), nullable=False),
        sa.Column("medium", sa.String(), nullable=False),
        sa.Column("dimensions", sa.String(), nullable=False),
        sa.Column("images", sa.JSON(), nullable=True),
        sa.Column("artist_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="available"),
        sa.Column("tags", sa.String(), nullable=True),
        sa.Column("views", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("featured", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_artwork_price", "artwork", ["price"])
    op.create_index("ix_artwork_category", "artwork", ["category"])
    op.create_index("ix_artwork_artist_id", "artwork", ["artist_id"])
    op.create_index("ix_artwork_status", "artwork", ["status"])
    op.create_index("ix_artwork_created_at", "artwork", ["created_at"])

    op.create_table(
        "artwork_like",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("artwork_id", sa.Integer(), sa.ForeignKey("artwork.id"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("artwork_id", "user_id"),
    )
    op.create_index("ix_artwork_like_artwork_id", "artwork_like", ["artwork_id"])

    op.create_table(
        "cart",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False, unique=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )

    op.create_table(
        "cart_item",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("cart_id", sa.Integer(), sa.ForeignKey("cart.id"), nullable=False),
        sa.Column("artwork_id", sa.Integer(), sa.ForeignKey("artwork.id"), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("added_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("cart_id", "artwork_id"),
    )
    op.create_index("ix_cart_item_cart_id", "cart_item", ["cart_id"])

    op.create_table(
        "exhibition",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=False),
        sa.Column("start_date", sa.DateTime(), nullable=False),
        sa.Column("end_date", sa.DateTime(), nullable=False),
        sa.Column("location", sa.String(), nullable=False),
        sa.Column("image", sa.String(), nullable=False),
        sa.Column("featured_artwork_ids", sa.JSON(), nullable=True),
        sa.Column("organizer_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="upcoming"),
        sa.Column("max_capacity", sa.Integer(), nullable=True),
        sa.Column("access_type", sa.String(), nullable=False, server_default="free"),
        sa.Column("price", sa.Float(), nullable=False, server_default="0"),
        sa.Column("tags", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_exhibition_start_date", "exhibition", ["start_date"])
    op.create_index("ix_exhibition_end_date", "exhibition", ["end_date"])
    op.create_index("ix_exhibition_organizer_id", "exhibition", ["organizer_id"])
    op.create_index("ix_exhibition_status", "exhibition", ["status"])

    op.create_table(
        "exhibition_registration",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("exhibition_id", sa.Integer(), sa.ForeignKey("exhibition.id"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("exhibition_id", "user_id"),
    )
    op.create_index(
        "ix_exhibition_registration_exhibition_id", "exhibition_registration", ["exhibition_id"]
    )

    op.create_table(
        "order",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("total_amount", sa.Float(), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="pending"),
        sa.Column("payment_method", sa.String(), nullable=False, server_default="razorpay"),
        sa.Column("payment_session_id", sa.String(), nullable=True),
        sa.Column("payment_intent_id", sa.String(), nullable=True),
        sa.Column("shipping_street", sa.String(), nullable=True),
        sa.Column("shipping_city", sa.String(), nullable=True),
        sa.Column("shipping_state", sa.String(), nullable=True),
        sa.Column("shipping_zip_code", sa.String(), nullable=True),
        sa.Column("shipping_country", sa.String(), nullable=True),
        sa.Column("exhibition_id", sa.Integer(), sa.ForeignKey("exhibition.id"), nullable=True),
        sa.Column("paid_at", sa.DateTime(), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(), nullable=True),
        sa.Column("refunded_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_order_user_id", "order", ["user_id"])
    op.create_index("ix_order_status", "order", ["status"])
    op.create_index("ix_order_payment_session_id", "order", ["payment_session_id"])
    op.create_index("ix_order_payment_intent_id", "order", ["payment_intent_id"])
    op.create_index("ix_order_created_at", "order", ["created_at"])

    op.create_table(
        "order_item",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("order_id", sa.Integer(), sa.ForeignKey("order.id"), nullable=False),
        sa.Column("artwork_id", sa.Integer(), sa.ForeignKey("artwork.id"), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("price", sa.Float(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
    )
    op.create_index("ix_order_item_order_id", "order_item", ["order_id"])

    op.create_table(
        "order_event",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("order_id", sa.Integer(), sa.ForeignKey("order.id"), nullable=False),
        sa.Column("event_type", sa.String(), nullable=False),
        sa.Column("from_status", sa.String(), nullable=True),
        sa.Column("to_status", sa.String(), nullable=True),
        sa.Column("meta", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("created_by", sa.String(), nullable=False, server_default="system"),
    )
    # indexes for fast timeline queries
    op.create_index("ix_order_event_order_id", "order_event", ["order_id"])
    op.create_index("ix_order_event_event_type", "order_event", ["event_type"])

    op.create_table(
        "exhibition_access",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("exhibition_id", sa.Integer(), sa.ForeignKey("exhibition.id"), nullable=False),
        sa.Column("access_type", sa.String(), nullable=False),
        sa.Column("payment_method", sa.String(), nullable=True),
        sa.Column("payment_session_id", sa.String(), nullable=True),
        sa.Column("order_id", sa.Integer(), sa.ForeignKey("order.id"), nullable=True),
        sa.Column("accessed_at", sa.DateTime(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint(
            "user_id", "exhibition_id", name="uq_exhibition_access_user_exhibition"
        ),
    )
    op.create_index("ix_exhibition_access_exhibition_id", "exhibition_access", ["exhibition_id"])
    op.create_index("ix_exhibition_access_access_type", "exhibition_access", ["access_type"])
    op.create_index("ix_exhibition_access_accessed_at", "exhibition_access", ["accessed_at"])

    op.create_table(
        "comment",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("artwork_id", sa.Integer(), sa.ForeignKey("artwork.id"), nullable=False),
        sa.Column("author_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("content", sa.String(length=500), nullable=False),
        sa.Column("parent_comment_id", sa.Integer(), sa.ForeignKey("comment.id"), nullable=True),
        sa.Column("is_edited", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("edited_at", sa.DateTime(), nullable=True),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
        sa.Column("deleted_by", sa.Integer(), sa.ForeignKey("user.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_comment_artwork_id", "comment", ["artwork_id"])
    op.create_index("ix_comment_author_id", "comment", ["author_id"])
    op.create_index("ix_comment_parent_comment_id", "comment", ["parent_comment_id"])
    op.create_index("ix_comment_is_deleted", "comment", ["is_deleted"])

    op.create_table(
        "comment_like",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("comment_id", sa.Integer(), sa.ForeignKey("comment.id"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("comment_id", "user_id"),
    )
    op.create_index("ix_comment_like_comment_id", "comment_like", ["comment_id"])

    op.create_table(
        "follow",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("follower_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("following_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("follower_id", "following_id"),
        sa.CheckConstraint("follower_id <> following_id", name="ck_follow_not_self"),
    )
    op.create_index("ix_follow_follower_id", "follow", ["follower_id"])
    op.create_index("ix_follow_following_id", "follow", ["following_id"])

    op.create_table(
        "conversation",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("participant_one_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("participant_two_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("artwork_id", sa.Integer(), sa.ForeignKey("artwork.id"), nullable=True),
        sa.Column("last_message_id", sa.Integer(), nullable=True),
        sa.Column("last_message_at", sa.DateTime(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("participant_one_id", "participant_two_id"),
    )
    op.create_index("ix_conversation_participant_one_id", "conversation", ["participant_one_id"])
    op.create_index("ix_conversation_participant_two_id", "conversation", ["participant_two_id"])
    op.create_index("ix_conversation_last_message_at", "conversation", ["last_message_at"])

    op.create_table(
        "message",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("conversation_id", sa.Integer(), sa.ForeignKey("conversation.id"), nullable=False),
        sa.Column("sender_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("receiver_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("artwork_id", sa.Integer(), sa.ForeignKey("artwork.id"), nullable=True),
        sa.Column("content", sa.String(length=1000), nullable=False),
        sa.Column("read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("read_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_message_conversation_id", "message", ["conversation_id"])
    op.create_index("ix_message_receiver_id", "message", ["receiver_id"])
    op.create_index("ix_message_created_at", "message", ["created_at"])

    op.create_table(
        "virtual_exhibition",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=False),
        sa.Column("theme", sa.String(), nullable=False),
        sa.Column("artist_notes", sa.String(), nullable=True),
        sa.Column("start_date", sa.DateTime(), nullable=False),
        sa.Column("end_date", sa.DateTime(), nullable=False),
        sa.Column("organizer_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="draft"),
        sa.Column("featured_artwork_ids", sa.JSON(), nullable=True),
        sa.Column("views", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("visits", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_free", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("price", sa.Float(), nullable=False, server_default="0"),
        sa.Column("tags", sa.String(), nullable=True),
        sa.Column("cover_image", sa.String(), nullable=False),
        sa.Column("additional_images", sa.JSON(), nullable=True),
        sa.Column("allow_comments", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("allow_sharing", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("require_registration", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("max_attendees", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_virtual_exhibition_theme", "virtual_exhibition", ["theme"])
    op.create_index("ix_virtual_exhibition_organizer_id", "virtual_exhibition", ["organizer_id"])
    op.create_index("ix_virtual_exhibition_status", "virtual_exhibition", ["status"])
    op.create_index("ix_virtual_exhibition_is_free", "virtual_exhibition", ["is_free"])

    op.create_table(
        "virtual_exhibition_attendee",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "virtual_exhibition_id", sa.Integer(), sa.ForeignKey("virtual_exhibition.id"), nullable=False
        ),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("joined_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("virtual_exhibition_id", "user_id"),
    )
    op.create_index(
        "ix_virtual_exhibition_attendee_virtual_exhibition_id",
        "virtual_exhibition_attendee",
        ["virtual_exhibition_id"],
    )


def downgrade():
    # reverse dependency order
    for table in (
        "virtual_exhibition_attendee",
        "virtual_exhibition",
        "message",
        "conversation",
        "follow",
        "comment_like",
        "comment",
        "exhibition_access",
        "order_event",
        "order_item",
        "order",
        "exhibition_registration",
        "exhibition",
        "cart_item",
        "cart",
        "artwork_like",
        "artwork",
        "user",
    ):
        op.drop_table(table)

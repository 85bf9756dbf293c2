"""initial schema: catalogs, enrollments, payments, certificates

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    ]


def _course_columns():
    return [
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("course_code", sa.String(50), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("status", sa.String(30), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("duration", sa.String(50), nullable=True),
        sa.Column("assessment_required", sa.Boolean(), nullable=False),
        sa.Column("assessment_type", sa.String(20), nullable=False),
        sa.Column("passing_score", sa.Integer(), nullable=False),
        sa.Column("certification_enabled", sa.Boolean(), nullable=False),
        sa.Column("minimum_attendance", sa.Integer(), nullable=False),
        *_timestamps(),
    ]


def _course_indexes(table: str):
    op.create_index(f"ix_{table}_id", table, ["id"])
    op.create_index(f"ix_{table}_title", table, ["title"])
    op.create_index(f"ix_{table}_course_code", table, ["course_code"], unique=True)


def upgrade() -> None:
    # --- Users ---
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(100), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("first_name", sa.String(50), nullable=False),
        sa.Column("last_name", sa.String(50), nullable=False),
        sa.Column("phone_number", sa.String(20), nullable=True),
        sa.Column("country", sa.String(100), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("role", sa.String(20), nullable=False),
        *_timestamps(),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    # --- Reference data ---
    op.create_table(
        "instructors",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("first_name", sa.String(50), nullable=False),
        sa.Column("last_name", sa.String(50), nullable=False),
        sa.Column("title", sa.String(150), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("profile_image", sa.Text(), nullable=True),
        sa.Column("credentials", sa.JSON(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index("ix_instructors_id", "instructors", ["id"])

    op.create_table(
        "certification_bodies",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("company_name", sa.String(255), nullable=False),
        sa.Column("display_name", sa.String(255), nullable=True),
        sa.Column("logo", sa.Text(), nullable=True),
        sa.Column("website", sa.String(255), nullable=True),
        sa.Column("contact_info", sa.JSON(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index("ix_certification_bodies_id", "certification_bodies", ["id"])

    op.create_table(
        "course_instructors",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("course_type", sa.String(50), nullable=False),
        sa.Column("course_id", sa.Integer(), nullable=False),
        sa.Column(
            "instructor_id",
            sa.Integer(),
            sa.ForeignKey("instructors.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("role", sa.String(50), nullable=False),
        sa.Column("is_primary", sa.Boolean(), nullable=False),
    )
    op.create_index("ix_course_instructors_id", "course_instructors", ["id"])
    op.create_index(
        "ix_course_instructors_course_type", "course_instructors", ["course_type"]
    )
    op.create_index(
        "ix_course_instructors_course_id", "course_instructors", ["course_id"]
    )

    op.create_table(
        "course_certification_bodies",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("course_type", sa.String(50), nullable=False),
        sa.Column("course_id", sa.Integer(), nullable=False),
        sa.Column(
            "body_id",
            sa.Integer(),
            sa.ForeignKey("certification_bodies.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("role", sa.String(50), nullable=False),
        sa.Column("is_primary", sa.Boolean(), nullable=False),
    )
    op.create_index(
        "ix_course_certification_bodies_id", "course_certification_bodies", ["id"]
    )
    op.create_index(
        "ix_course_certification_bodies_course_type",
        "course_certification_bodies",
        ["course_type"],
    )
    op.create_index(
        "ix_course_certification_bodies_course_id",
        "course_certification_bodies",
        ["course_id"],
    )

    # --- Catalogs ---
    op.create_table(
        "online_live_courses",
        *_course_columns(),
        sa.Column("platform_name", sa.String(100), nullable=True),
        sa.Column("total_sessions", sa.Integer(), nullable=True),
        sa.Column("linked_in_person_course_id", sa.Integer(), nullable=True),
        sa.Column("linked_to_in_person", sa.Boolean(), nullable=False),
        sa.Column("linked_type", sa.String(20), nullable=True),
        sa.Column("suppress_certificate", sa.Boolean(), nullable=False),
    )
    _course_indexes("online_live_courses")
    op.create_index(
        "ix_online_live_courses_linked_in_person_course_id",
        "online_live_courses",
        ["linked_in_person_course_id"],
    )

    op.create_table(
        "in_person_courses",
        *_course_columns(),
        sa.Column("seats_available", sa.Integer(), nullable=False),
        sa.Column("venue_name", sa.String(255), nullable=True),
        sa.Column("venue_city", sa.String(100), nullable=True),
        sa.Column("venue_country", sa.String(100), nullable=True),
        sa.Column("materials_count", sa.Integer(), nullable=False),
        sa.Column(
            "linked_online_course_id",
            sa.Integer(),
            sa.ForeignKey("online_live_courses.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("linked_is_required", sa.Boolean(), nullable=False),
        sa.Column("linked_relationship", sa.String(20), nullable=False),
        sa.Column("linked_completion_required", sa.Boolean(), nullable=False),
        sa.Column("linked_is_free", sa.Boolean(), nullable=False),
        sa.Column("linked_custom_price", sa.Numeric(10, 2), nullable=False),
    )
    _course_indexes("in_person_courses")
    op.create_index(
        "ix_in_person_courses_linked_online_course_id",
        "in_person_courses",
        ["linked_online_course_id"],
    )

    op.create_table(
        "self_paced_courses",
        *_course_columns(),
        sa.Column("access_days", sa.Integer(), nullable=False),
    )
    _course_indexes("self_paced_courses")

    op.create_table(
        "self_paced_videos",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "course_id",
            sa.Integer(),
            sa.ForeignKey("self_paced_courses.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("sequence", sa.Integer(), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=True),
        sa.Column("has_exam", sa.Boolean(), nullable=False),
        sa.Column("exam_passing_score", sa.Integer(), nullable=False),
    )
    op.create_index("ix_self_paced_videos_id", "self_paced_videos", ["id"])
    op.create_index(
        "ix_self_paced_videos_course_id", "self_paced_videos", ["course_id"]
    )

    # --- Payments ---
    op.create_table(
        "payment_transactions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("transaction_id", sa.String(64), nullable=False),
        sa.Column("order_number", sa.String(64), nullable=False),
        sa.Column("receipt_number", sa.String(64), nullable=False),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("payment_status", sa.String(20), nullable=False),
        sa.Column("payment_method", sa.String(50), nullable=True),
        sa.Column("gateway_reference", sa.String(255), nullable=True),
        sa.Column("subtotal", sa.Numeric(10, 2), nullable=False),
        sa.Column("discount_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("final_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_payment_transactions_id", "payment_transactions", ["id"])
    op.create_index(
        "ix_payment_transactions_transaction_id",
        "payment_transactions",
        ["transaction_id"],
    )
    op.create_index(
        "ix_payment_transactions_order_number",
        "payment_transactions",
        ["order_number"],
        unique=True,
    )
    op.create_index(
        "ix_payment_transactions_user_id", "payment_transactions", ["user_id"]
    )
    op.create_index(
        "ix_payment_transactions_payment_status",
        "payment_transactions",
        ["payment_status"],
    )

    # --- Enrollments ---
    op.create_table(
        "enrollments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("course_type", sa.String(50), nullable=False),
        sa.Column("course_id", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column(
            "registration_date",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column("expiry_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("paid_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("original_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column(
            "payment_transaction_id",
            sa.Integer(),
            sa.ForeignKey("payment_transactions.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("is_linked_course", sa.Boolean(), nullable=False),
        sa.Column("is_linked_course_free", sa.Boolean(), nullable=False),
        sa.Column(
            "parent_enrollment_id",
            sa.Integer(),
            sa.ForeignKey("enrollments.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("course_status", sa.String(20), nullable=False),
        sa.Column("completion_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("overall_attendance_percentage", sa.Float(), nullable=True),
        sa.Column("assessment_completed", sa.Boolean(), nullable=False),
        sa.Column("assessment_score", sa.Float(), nullable=True),
        sa.Column("best_assessment_score", sa.Float(), nullable=True),
        sa.Column("last_assessment_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("certificate_id", sa.String(64), nullable=True),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.UniqueConstraint(
            "user_id", "course_type", "course_id", name="uq_enrollment_user_course"
        ),
    )
    op.create_index("ix_enrollments_id", "enrollments", ["id"])
    op.create_index("ix_enrollments_user_id", "enrollments", ["user_id"])
    op.create_index("ix_enrollments_course_type", "enrollments", ["course_type"])
    op.create_index("ix_enrollments_course_id", "enrollments", ["course_id"])
    op.create_index("ix_enrollments_status", "enrollments", ["status"])
    op.create_index(
        "ix_enrollments_parent_enrollment_id", "enrollments", ["parent_enrollment_id"]
    )

    op.create_table(
        "attendance_records",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "enrollment_id",
            sa.Integer(),
            sa.ForeignKey("enrollments.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("hours_attended", sa.Float(), nullable=True),
    )
    op.create_index("ix_attendance_records_id", "attendance_records", ["id"])
    op.create_index(
        "ix_attendance_records_enrollment_id", "attendance_records", ["enrollment_id"]
    )

    op.create_table(
        "session_attendances",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "enrollment_id",
            sa.Integer(),
            sa.ForeignKey("enrollments.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("session_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("is_confirmed", sa.Boolean(), nullable=False),
        sa.Column("attendance_percentage", sa.Float(), nullable=True),
    )
    op.create_index("ix_session_attendances_id", "session_attendances", ["id"])
    op.create_index(
        "ix_session_attendances_enrollment_id",
        "session_attendances",
        ["enrollment_id"],
    )

    op.create_table(
        "video_progress",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "enrollment_id",
            sa.Integer(),
            sa.ForeignKey("enrollments.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "video_id",
            sa.Integer(),
            sa.ForeignKey("self_paced_videos.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("video_completed", sa.Boolean(), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("exam_completed", sa.Boolean(), nullable=False),
        sa.Column("exam_score", sa.Float(), nullable=True),
        sa.Column("exam_attempts", sa.Integer(), nullable=False),
        sa.UniqueConstraint("enrollment_id", "video_id", name="uq_video_progress"),
    )
    op.create_index("ix_video_progress_id", "video_progress", ["id"])
    op.create_index(
        "ix_video_progress_enrollment_id", "video_progress", ["enrollment_id"]
    )

    op.create_table(
        "payment_transaction_items",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "transaction_id",
            sa.Integer(),
            sa.ForeignKey("payment_transactions.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "enrollment_id",
            sa.Integer(),
            sa.ForeignKey("enrollments.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("course_type", sa.String(50), nullable=False),
        sa.Column("course_id", sa.Integer(), nullable=False),
        sa.Column("course_title", sa.String(255), nullable=False),
        sa.Column("original_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("paid_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("is_linked_course_free", sa.Boolean(), nullable=False),
    )
    op.create_index(
        "ix_payment_transaction_items_id", "payment_transaction_items", ["id"]
    )
    op.create_index(
        "ix_payment_transaction_items_transaction_id",
        "payment_transaction_items",
        ["transaction_id"],
    )

    # --- Certificates ---
    op.create_table(
        "certificates",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("certificate_id", sa.String(64), nullable=False),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("course_id", sa.Integer(), nullable=False),
        sa.Column("course_type", sa.String(50), nullable=False),
        sa.Column("recipient_name", sa.String(150), nullable=False),
        sa.Column("course_title", sa.String(255), nullable=False),
        sa.Column("course_code", sa.String(50), nullable=True),
        sa.Column("primary_instructor_name", sa.String(150), nullable=True),
        sa.Column("primary_issuing_authority", sa.String(255), nullable=True),
        sa.Column("instructors", sa.JSON(), nullable=False),
        sa.Column("certification_bodies", sa.JSON(), nullable=False),
        sa.Column("delivery_method", sa.String(255), nullable=True),
        sa.Column("completion_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("issue_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expiry_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("attendance_percentage", sa.Float(), nullable=True),
        sa.Column("exam_score", sa.Float(), nullable=True),
        sa.Column("total_hours", sa.Integer(), nullable=True),
        sa.Column("grade", sa.String(10), nullable=False),
        sa.Column("course_specific_data", sa.JSON(), nullable=False),
        sa.Column("verification_code", sa.String(32), nullable=False),
        sa.Column("digital_signature", sa.String(128), nullable=False),
        sa.Column("qr_code_url", sa.String(255), nullable=True),
        sa.Column("pdf_url", sa.String(255), nullable=True),
        sa.Column("image_url", sa.String(255), nullable=True),
        sa.Column("download_count", sa.Integer(), nullable=False),
        sa.Column("last_downloaded", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_public", sa.Boolean(), nullable=False),
        sa.Column("share_url", sa.String(255), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.UniqueConstraint(
            "user_id", "course_id", "course_type", name="uq_certificate_user_course"
        ),
    )
    op.create_index("ix_certificates_id", "certificates", ["id"])
    op.create_index(
        "ix_certificates_certificate_id", "certificates", ["certificate_id"], unique=True
    )
    op.create_index(
        "ix_certificates_verification_code",
        "certificates",
        ["verification_code"],
        unique=True,
    )
    op.create_index("ix_certificates_user_id", "certificates", ["user_id"])

    op.create_table(
        "achievement_summaries",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("total_certificates", sa.Integer(), nullable=False),
        sa.Column("specializations", sa.JSON(), nullable=False),
        sa.Column("total_learning_hours", sa.Integer(), nullable=False),
        sa.Column("achievement_level", sa.String(20), nullable=False),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index("ix_achievement_summaries_id", "achievement_summaries", ["id"])
    op.create_index(
        "ix_achievement_summaries_user_id",
        "achievement_summaries",
        ["user_id"],
        unique=True,
    )


def downgrade() -> None:
    op.drop_table("achievement_summaries")
    op.drop_table("certificates")
    op.drop_table("payment_transaction_items")
    op.drop_table("video_progress")
    op.drop_table("session_attendances")
    op.drop_table("attendance_records")
    op.drop_table("enrollments")
    op.drop_table("payment_transactions")
    op.drop_table("self_paced_videos")
    op.drop_table("self_paced_courses")
    op.drop_table("in_person_courses")
    op.drop_table("online_live_courses")
    op.drop_table("course_certification_bodies")
    op.drop_table("course_instructors")
    op.drop_table("certification_bodies")
    op.drop_table("instructors")
    op.drop_table("users")

"""
Application initialization module
Handles initial setup tasks like creating the default admin account
"""

import logging

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.hasher import PasswordHelper
from app.models.user import User

logger = logging.getLogger(__name__)


def init_default_admin(db: Session) -> None:
    """
    Create the admin account from settings if no admin exists yet.
    Skipped unless both ADMIN_DEFAULT_EMAIL and ADMIN_DEFAULT_PASSWORD are set.
    """
    if not settings.admin_default_email or not settings.admin_default_password:
        logger.info("Default admin not configured, skipping")
        return

    try:
        existing_admin = db.query(User).filter(User.role == "admin").first()

        if existing_admin:
            logger.info(f"Admin user already exists (ID: {existing_admin.id})")
            return

        admin = User(
            email=settings.admin_default_email.lower(),
            hashed_password=PasswordHelper.hash_password(
                settings.admin_default_password
            ),
            first_name="Platform",
            last_name="Admin",
            role="admin",
        )

        db.add(admin)
        db.commit()
        db.refresh(admin)

        logger.info(f"Default admin created: {settings.admin_default_email}")
        logger.warning("Change the default admin password immediately!")

    except Exception as e:
        logger.error(f"Failed to initialize default admin: {e}")
        db.rollback()
        raise


def initialize_application(db: Session) -> None:
    """
    Run all application initialization tasks.
    """
    logger.info("Starting application initialization...")

    init_default_admin(db)

    logger.info("Application initialization completed!")

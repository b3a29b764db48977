# modules/security/bootstrap.py
import logging
from typing import Optional

from sqlalchemy.orm import Session

from config.settings import settings
from database.connection import SessionLocal
from modules.security.model import User, UserRole
from modules.security.passwords import hash_password

logger = logging.getLogger(__name__)


def ensure_default_admin(db: Optional[Session] = None) -> Optional[User]:
    """
    Create the default admin account if no admin exists yet.
    Admin cannot be chosen at registration, so this is the only way in.
    """
    if not settings.SEED_DEFAULT_ADMIN:
        return None

    own_session = db is None
    db = db or SessionLocal()
    try:
        existing = db.query(User).filter(User.role == UserRole.ADMIN).first()
        if existing:
            return existing

        taken = (
            db.query(User)
            .filter(
                (User.username == settings.DEFAULT_ADMIN_USERNAME)
                | (User.email == settings.DEFAULT_ADMIN_EMAIL.lower())
            )
            .first()
        )
        if taken:
            logger.warning(
                "Default admin not seeded: username/email already used by user %s", taken.id
            )
            return None

        admin = User(
            username=settings.DEFAULT_ADMIN_USERNAME,
            email=settings.DEFAULT_ADMIN_EMAIL.lower(),
            password_hash=hash_password(settings.DEFAULT_ADMIN_PASSWORD),
            first_name="System",
            last_name="Administrator",
            role=UserRole.ADMIN,
            department="Administration",
        )
        db.add(admin)
        db.commit()
        db.refresh(admin)
        logger.info("Seeded default admin user '%s'", admin.username)
        return admin
    finally:
        if own_session:
            db.close()

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from .core.config import settings
from .core.database import SessionLocal
from .core.log_config import configure_logging
from .models import User
from .services.category_service import CategoryService
from .store import LedgerStore

logger = logging.getLogger(__name__)


def seed() -> None:
    db: Session = SessionLocal()
    try:
        # demo account
        user = db.query(User).filter_by(email=settings.DEMO_EMAIL).first()
        if not user:
            user = User(email=settings.DEMO_EMAIL, is_active=True)
            db.add(user)
            db.commit()
            db.refresh(user)
            logger.info("Created demo user %s", user.email)

        # default category set (no-op when the account already has categories)
        categories = CategoryService(LedgerStore(db)).list_categories(user.id)
        logger.info("Demo user %s has %d categories", user.email, len(categories))
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    configure_logging()
    seed()

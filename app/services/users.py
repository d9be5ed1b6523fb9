import logging

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.user import User
from app.schemas.user import UserUpdate
from app.services.common import coerce_uuid, utcnow

logger = logging.getLogger(__name__)


class Users:
    @staticmethod
    def get(db: Session, user_id: str) -> User:
        user = db.get(User, coerce_uuid(user_id))
        if not user:
            raise HTTPException(status_code=404, detail="User not found")
        return user

    @staticmethod
    def get_or_create(db: Session, provider_user_id: str, mobile_number: str) -> User:
        """Find the user behind a verified phone, creating it on first sign-in."""
        try:
            user_id = coerce_uuid(provider_user_id)
        except ValueError:
            logger.debug("Provider user id %s is not a UUID", provider_user_id)
            user_id = None

        user = db.get(User, user_id) if user_id else None
        if user is None:
            user = db.scalars(
                select(User).where(User.mobile_number == mobile_number)
            ).first()
        if user is not None:
            return user

        user = User(mobile_number=mobile_number)
        if user_id:
            user.id = user_id
        db.add(user)
        db.flush()
        logger.info("Created user %s for %s", user.id, mobile_number)
        return user

    @staticmethod
    def update(db: Session, user_id: str, payload: UserUpdate) -> User:
        user = Users.get(db, user_id)
        data = payload.model_dump(exclude_unset=True)
        for key, value in data.items():
            setattr(user, key, value)
        user.updated_at = utcnow()
        db.commit()
        db.refresh(user)
        logger.info("Updated profile %s (%s)", user.id, ", ".join(sorted(data)))
        return user


users = Users()

# billtracker/api/v1/users.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from billtracker.api.v1.deps import get_current_user
from billtracker.db import models
from billtracker.db.session import get_db
from billtracker.schemas.user import NotificationSettingsUpdate, UserOut

router = APIRouter(tags=["users"])


@router.get("/me", response_model=UserOut)
def me(current_user: models.User = Depends(get_current_user)):
    return current_user


@router.patch("/me/notifications", response_model=UserOut)
def update_notification_settings(
    payload: NotificationSettingsUpdate,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    data = payload.model_dump(exclude_unset=True)
    if "notification_email" in data:
        current_user.notification_email = (data["notification_email"] or "").strip().lower() or None
    if data.get("notification_days_before") is not None:
        current_user.notification_days_before = data["notification_days_before"]
    db.add(current_user)
    db.commit()
    db.refresh(current_user)
    return current_user

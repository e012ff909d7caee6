# billtracker/api/v1/notifications.py
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from billtracker.api.v1.deps import get_current_user, get_file_store, get_mailer
from billtracker.db import models
from billtracker.db.session import get_db
from billtracker.services.notifications import NotificationService

logger = logging.getLogger(__name__)
router = APIRouter(tags=["notifications"])


@router.post("/test")
def run_test_sweep(
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
    mailer=Depends(get_mailer),
    file_store=Depends(get_file_store),
):
    """Run the regular reminder sweep now instead of waiting for the 18:00 job."""
    logger.info("Manual reminder sweep requested by user %s", current_user.id)
    processed = NotificationService.from_session(db, mailer, file_store).run_regular_notification_sweep()
    return {"processed": processed}

# billtracker/api/v1/deps.py
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from billtracker.db import models
from billtracker.db.repositories import BillRepository, CategoryRepository, NotificationLedger, UserRepository
from billtracker.db.session import get_db
from billtracker.services.security import JWTError, decode_access_token

bearer_scheme = HTTPBearer()  # reads "Authorization: Bearer <token>"


def get_settings(request: Request):
    return request.app.state.settings


def get_file_store(request: Request):
    return request.app.state.file_store


def get_mailer(request: Request):
    return request.app.state.mailer


def get_bill_repo(db: Session = Depends(get_db)) -> BillRepository:
    return BillRepository(db)


def get_category_repo(db: Session = Depends(get_db)) -> CategoryRepository:
    return CategoryRepository(db)


def get_user_repo(db: Session = Depends(get_db)) -> UserRepository:
    return UserRepository(db)


def get_ledger(db: Session = Depends(get_db)) -> NotificationLedger:
    return NotificationLedger(db)


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: Session = Depends(get_db),
    settings=Depends(get_settings),
) -> models.User:
    try:
        payload = decode_access_token(credentials.credentials, settings.SECRET_KEY)
    except JWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Could not validate credentials")

    sub = payload.get("sub")
    if sub is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token (no sub)")

    try:
        user_id = int(sub)
    except (TypeError, ValueError):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token subject")

    user = UserRepository(db).find_by_id(user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    return user

# billtracker/api/v1/auth.py
from fastapi import APIRouter, Depends, HTTPException, status

from billtracker.api.v1.deps import get_settings, get_user_repo
from billtracker.db import models
from billtracker.db.repositories import UserRepository
from billtracker.schemas.auth import LoginRequest, Token, UserCreate
from billtracker.services.security import create_access_token, hash_password, verify_password

router = APIRouter()


@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
def register(payload: UserCreate, users: UserRepository = Depends(get_user_repo), settings=Depends(get_settings)):
    email = payload.email.lower()
    if users.find_by_email(email):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")
    user = users.insert(
        models.User(
            name=payload.name.strip(),
            email=email,
            hashed_password=hash_password(payload.password),
            notification_days_before=3,
        )
    )
    token = create_access_token(user.id, secret_key=settings.SECRET_KEY)
    return {"access_token": token, "token_type": "bearer"}


@router.post("/login", response_model=Token)
def login(payload: LoginRequest, users: UserRepository = Depends(get_user_repo), settings=Depends(get_settings)):
    user = users.find_by_email(payload.email)
    if not user or not verify_password(payload.password, user.hashed_password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    token = create_access_token(user.id, secret_key=settings.SECRET_KEY)
    return {"access_token": token, "token_type": "bearer"}

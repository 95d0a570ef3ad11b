from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from ecofreight.infrastructure.db import get_db
from ecofreight.application.auth_service import AuthService
from ecofreight.application.schemas import (
    LoginRequest, ProfileRead, ProfileUpdate, SignupRequest, TokenResponse, UserRead,
)
from ecofreight.domain.models import User
from .deps import get_current_user

router = APIRouter(prefix="/auth", tags=["auth"])

@router.post("/signup", response_model=UserRead, status_code=201)
def signup(payload: SignupRequest, db: Session = Depends(get_db)):
    """Register a new account. Self-registered users are customers."""
    return AuthService(db).signup(payload)

@router.post("/login", response_model=TokenResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    return AuthService(db).login(payload.email, payload.password)

@router.get("/me", response_model=UserRead)
def me(user: User = Depends(get_current_user)):
    return user

@router.get("/profiles/{user_id}", response_model=ProfileRead)
def get_profile(user_id: str, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return AuthService(db).get_profile(user_id)

@router.patch("/me/profile", response_model=ProfileRead)
def update_profile(payload: ProfileUpdate, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return AuthService(db).update_profile(user.id, payload)

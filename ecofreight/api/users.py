from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from ecofreight.infrastructure.db import get_db
from ecofreight.application.auth_service import AuthService
from ecofreight.application.schemas import Role, RoleUpdate, UserCreate, UserRead
from .deps import require_role

router = APIRouter(prefix="/users", tags=["users"], dependencies=[Depends(require_role("manager"))])

@router.get("/", response_model=list[UserRead])
def list_users(role: Optional[Role] = None, db: Session = Depends(get_db)):
    service = AuthService(db)
    if role:
        return service.list_by_role(role)
    return service.list_users()

@router.post("/", response_model=UserRead, status_code=201)
def create_user(payload: UserCreate, db: Session = Depends(get_db)):
    return AuthService(db).create_user(payload)

@router.put("/{user_id}/role", response_model=UserRead)
def set_role(user_id: str, payload: RoleUpdate, db: Session = Depends(get_db)):
    return AuthService(db).set_role(user_id, payload.role)

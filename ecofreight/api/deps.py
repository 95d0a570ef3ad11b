from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session
from ecofreight.auth_local import decode_access_token
from ecofreight.infrastructure.db import get_db
from ecofreight.application.auth_service import AuthService
from ecofreight.domain.models import User
from shared.core import set_request_context

BEARER_PREFIX = "Bearer "

def verify_token(request: Request) -> dict:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith(BEARER_PREFIX):
        raise HTTPException(status_code=401, detail="Missing token")
    token = auth_header.split(" ", 1)[1]
    token_data = decode_access_token(token)
    if not token_data or not token_data.get("sub"):
        raise HTTPException(status_code=401, detail="Invalid token")
    return token_data

def get_current_user(token_data: dict = Depends(verify_token), db: Session = Depends(get_db)) -> User:
    user = AuthService(db).get_user(token_data["sub"])
    if not user:
        raise HTTPException(status_code=401, detail="Invalid token")
    set_request_context(user_id=user.id)
    return user

def require_role(*roles: str):
    """Dependency factory: 403 unless the current user holds one of ``roles``."""
    def checker(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            raise HTTPException(status_code=403, detail="Insufficient permissions")
        return user
    return checker

from sqlalchemy.orm import Session, selectinload
from fastapi import HTTPException
from ecofreight.domain.models import User, Profile, UserRole
from ecofreight.auth_local import hash_password, verify_password, create_access_token
from shared.core import get_logger
from .schemas import SignupRequest, UserCreate, ProfileUpdate

logger = get_logger(__name__)

class AuthService:
    def __init__(self, db: Session):
        self.db = db

    def _query_users(self):
        return self.db.query(User).options(selectinload(User.profile), selectinload(User.role_row))

    def get_user(self, user_id: str):
        return self._query_users().filter(User.id == user_id).first()

    def signup(self, data: SignupRequest, role: str = "customer") -> User:
        email = data.email.strip().lower()
        if self.db.query(User).filter(User.email == email).first():
            raise HTTPException(status_code=409, detail="Email already registered")

        user = User(email=email, password_hash=hash_password(data.password))
        user.profile = Profile(full_name=data.full_name, company=data.company)
        user.role_row = UserRole(role=role)
        self.db.add(user)
        self.db.commit()
        logger.info(f"User {user.id} signed up with role {role}")
        return self.get_user(user.id)

    def create_user(self, data: UserCreate) -> User:
        return self.signup(data, role=data.role)

    def login(self, email: str, password: str) -> dict:
        user = self._query_users().filter(User.email == email.strip().lower()).first()
        if not user or not verify_password(password, user.password_hash):
            logger.warning("Sign in failed: invalid credentials")
            raise HTTPException(status_code=401, detail="Invalid email or password")
        return {
            "access_token": create_access_token(user.id, role=user.role),
            "token_type": "bearer",
            "user_id": user.id,
            "role": user.role,
        }

    def list_users(self):
        return self._query_users().order_by(User.created_at.desc()).all()

    def list_by_role(self, role: str):
        return self._query_users().join(UserRole).filter(UserRole.role == role).all()

    def set_role(self, user_id: str, role: str) -> User:
        user = self.get_user(user_id)
        if not user:
            raise HTTPException(status_code=404, detail="User not found")
        # Update the existing role row, or create one for users that never had a role
        if user.role_row:
            user.role_row.role = role
        else:
            user.role_row = UserRole(role=role)
        self.db.commit()
        logger.info(f"User {user_id} role set to {role}")
        return user

    def get_profile(self, user_id: str) -> Profile:
        profile = self.db.query(Profile).filter(Profile.id == user_id).first()
        if not profile:
            raise HTTPException(status_code=404, detail="Profile not found")
        return profile

    def update_profile(self, user_id: str, data: ProfileUpdate) -> Profile:
        profile = self.get_profile(user_id)
        for key, value in data.model_dump(exclude_unset=True).items():
            setattr(profile, key, value)
        self.db.commit()
        self.db.refresh(profile)
        return profile

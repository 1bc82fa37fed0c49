"""Reusable FastAPI dependencies for auth, tenancy and database access."""
from typing import Any, Callable, Dict

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from .auth import decode_token
from .database import get_db
from .models import Profile, RoleEnum, User

oauth_scheme = OAuth2PasswordBearer(tokenUrl="/auth/sign-in")


def get_token_payload(token: str = Depends(oauth_scheme), db: Session = Depends(get_db)) -> Dict[str, Any]:
    return decode_token(token, db)


def get_current_user(payload: Dict[str, Any] = Depends(get_token_payload), db: Session = Depends(get_db)) -> User:
    email: str | None = payload.get("sub")
    if email is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing subject in token")
    user = db.query(User).filter(User.email == email).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


def get_current_profile(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> Profile:
    profile = db.query(Profile).filter(Profile.user_id == current_user.id).first()
    if not profile:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No hotel associated with your account")
    return profile


def get_current_hotel_id(profile: Profile = Depends(get_current_profile)) -> int:
    return profile.hotel_id


def allow_roles(*roles: RoleEnum) -> Callable[[Profile], Profile]:
    def dependency(profile: Profile = Depends(get_current_profile)) -> Profile:
        if profile.role not in roles:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
        return profile

    return dependency

"""Password hashing, JWT handling, and session revocation helpers."""
from datetime import datetime, timedelta
from typing import Any, Dict, Optional
from uuid import uuid4

from fastapi import HTTPException, status
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from .cache import SimpleTTLCache
from .config import get_settings
from .models import RevokedToken, User

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
settings = get_settings()
# Read-through cache in front of the revoked_tokens table.
revoked_tokens: SimpleTTLCache[bool] = SimpleTTLCache(
    ttl=settings.access_token_expire_minutes * 60, maxsize=4096
)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))
    to_encode.update({"exp": expire, "jti": uuid4().hex})
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str, db: Session) -> Dict[str, Any]:
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError as exc:  # pragma: no cover - jose already tested
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token") from exc
    if is_token_revoked(db, payload.get("jti")):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Session has been signed out")
    return payload


def revoke_token(db: Session, token_id: str, expires_at: datetime) -> None:
    """Record a signed-out token id in the shared ``revoked_tokens`` table.

    Every service process checks that table, so sign-out holds everywhere.
    Rows whose token has expired anyway are pruned on the way.
    """

    db.query(RevokedToken).filter(RevokedToken.expires_at < datetime.utcnow()).delete(synchronize_session=False)
    if db.get(RevokedToken, token_id) is None:
        db.add(RevokedToken(jti=token_id, expires_at=expires_at))
    db.commit()
    revoked_tokens.set(token_id, True)


def is_token_revoked(db: Session, token_id: Optional[str]) -> bool:
    if not token_id:
        return False
    if token_id in revoked_tokens:
        return True
    if db.get(RevokedToken, token_id) is None:
        return False
    revoked_tokens.set(token_id, True)
    return True


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    user: Optional[User] = db.query(User).filter(User.email == email.lower()).first()
    if not user or not verify_password(password, user.hashed_password):
        return None
    return user

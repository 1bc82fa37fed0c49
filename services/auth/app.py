import logging
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer, OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from common import auth
from common.app_factory import create_service_app
from common.database import get_db
from common.dependencies import get_token_payload
from common.models import User
from common.rate_limit import AUTH_LIMIT, READ_LIMIT, limiter
from common.schemas import SessionInfo, SessionRead, SignUpRequest, Token, UserRead

logger = logging.getLogger("auth.events")

optional_oauth_scheme = OAuth2PasswordBearer(tokenUrl="/auth/sign-in", auto_error=False)

app = create_service_app("Auth Service", "auth")


@app.post("/auth/sign-up", response_model=UserRead, status_code=status.HTTP_201_CREATED)
@limiter.limit(AUTH_LIMIT)
def sign_up(request: Request, payload: SignUpRequest, db: Session = Depends(get_db)) -> User:
    email = payload.email.lower()
    if db.query(User).filter(User.email == email).first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="An account with this email already exists",
        )
    user = User(email=email, hashed_password=auth.get_password_hash(payload.password))
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Auth state changed: SIGNED_UP %s", user.email)
    return user


@app.post("/auth/sign-in", response_model=Token)
@limiter.limit(AUTH_LIMIT)
def sign_in(request: Request, form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)) -> Token:
    user = auth.authenticate_user(db, form_data.username, form_data.password)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password")

    access_token = auth.create_access_token({"sub": user.email})
    logger.info("Auth state changed: SIGNED_IN %s", user.email)
    return Token(access_token=access_token)


@app.post("/auth/sign-out", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit(AUTH_LIMIT)
def sign_out(
    request: Request,
    payload: Dict[str, Any] = Depends(get_token_payload),
    db: Session = Depends(get_db),
) -> None:
    auth.revoke_token(db, payload["jti"], datetime.utcfromtimestamp(payload["exp"]))
    logger.info("Auth state changed: SIGNED_OUT %s", payload.get("sub"))


@app.get("/auth/session", response_model=SessionRead)
@limiter.limit(READ_LIMIT)
def current_session(
    request: Request,
    token: Optional[str] = Depends(optional_oauth_scheme),
    db: Session = Depends(get_db),
) -> SessionRead:
    """Describe the caller's session; anonymous callers get ``is_authenticated=False``."""

    if not token:
        return SessionRead()
    try:
        payload = auth.decode_token(token, db)
    except HTTPException:
        return SessionRead()
    user = db.query(User).filter(User.email == payload.get("sub")).first()
    if not user:
        return SessionRead()
    return SessionRead(
        user=UserRead.model_validate(user),
        session=SessionInfo(token_id=payload["jti"], expires_at=datetime.utcfromtimestamp(payload["exp"])),
        is_authenticated=True,
    )

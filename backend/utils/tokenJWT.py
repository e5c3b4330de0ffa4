# utils/tokenJWT.py
from jose import jwt, JWTError
from datetime import datetime, timedelta
from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from config import settings
from database import get_db
from models.users import User
from utils.errors import AuthError

# Tokens are issued by the auth service; this API only verifies them
bearer_scheme = HTTPBearer(auto_error=False)

# Generate a new JWT access token (used by the auth service and by tests)
def create_access_token(data: dict, expires_delta: timedelta = None):
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

# Resolve the e-mail carried in a token, or None when the token is unusable
def decode_subject(token: str) -> Optional[str]:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None
    return payload.get("sub")

# Retrieve the currently authenticated user based on the JWT token
def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db)
) -> User:
    if credentials is None:
        raise AuthError()

    email = decode_subject(credentials.credentials)
    # Ensure email is present in the token payload
    if email is None:
        raise AuthError("Could not validate credentials")

    user = db.query(User).filter(User.email == email).first()
    if user is None:
        raise AuthError("Could not validate credentials")
    return user

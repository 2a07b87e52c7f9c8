# aidoctor/deps.py
from typing import Optional
from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from sqlalchemy.orm import Session
from . import config, database, models

bearer = HTTPBearer(auto_error=False)

def get_current_user(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    db: Session = Depends(database.get_db)
) -> models.User:
    if not creds:
        raise HTTPException(status_code=401, detail="Not authenticated")
    token = creds.credentials
    try:
        payload = jwt.decode(token, config.JWT_SECRET, algorithms=[config.JWT_ALGORITHM])
        user_id = int(payload.get("sub"))
    except (JWTError, ValueError, TypeError):
        raise HTTPException(status_code=401, detail="Invalid token")
    user = db.get(models.User, user_id)
    if not user or not user.is_active:
        raise HTTPException(status_code=401, detail="Invalid user")
    return user

def require_role(*roles: str):
    """Dependency factory: the current user must hold one of ``roles``."""
    def checker(current: models.User = Depends(get_current_user)) -> models.User:
        if current.role not in roles:
            raise HTTPException(status_code=403, detail=f"{current.role} accounts cannot access this resource")
        return current
    return checker

get_current_patient = require_role(models.ROLE_PATIENT)
get_current_doctor = require_role(models.ROLE_DOCTOR)
get_current_fundraiser = require_role(models.ROLE_FUNDRAISER)

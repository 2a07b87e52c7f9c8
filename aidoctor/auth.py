# aidoctor/auth.py
from datetime import datetime, timedelta
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from jose import jwt
from passlib.hash import bcrypt

from . import schemas, models, database, config
from .deps import get_current_user

router = APIRouter(prefix="/auth", tags=["auth"])

def create_access_token(sub: str, role: str) -> str:
    expire = datetime.utcnow() + timedelta(hours=config.JWT_EXPIRE_HOURS)
    payload = {"sub": sub, "role": role, "exp": expire}
    return jwt.encode(payload, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)

@router.post("/signup", response_model=schemas.UserOut, status_code=201)
def signup(payload: schemas.UserSignup, db: Session = Depends(database.get_db)):
    existing = db.query(models.User).filter(models.User.email == payload.email).first()
    if existing:
        raise HTTPException(status_code=400, detail="Email already registered")
    if len(payload.password) < 6:
        raise HTTPException(status_code=400, detail="Password must be at least 6 characters")
    hashed = bcrypt.hash(payload.password)
    user = models.User(
        email=payload.email,
        full_name=(payload.full_name or "").strip() or None,
        role=payload.role,
        password_hash=hashed.encode(),
        is_active=True,
    )
    db.add(user)
    database.commit_or_raise(db, "create user profile")
    db.refresh(user)
    return user

@router.post("/login", response_model=schemas.Token)
def login(payload: schemas.UserLogin, db: Session = Depends(database.get_db)):
    user = db.query(models.User).filter(models.User.email == payload.email).first()
    if not user:
        raise HTTPException(status_code=401, detail="Invalid credentials")

    # stored as bytes -> decode to str for passlib verify
    stored = user.password_hash.decode()
    if not bcrypt.verify(payload.password, stored):
        raise HTTPException(status_code=401, detail="Invalid credentials")

    token = create_access_token(str(user.id), user.role)
    user.last_login_at = datetime.utcnow()
    db.add(user); db.commit()
    return {"access_token": token, "token_type": "bearer", "role": user.role}

@router.get("/me", response_model=schemas.UserOut)
def read_current_user(current: models.User = Depends(get_current_user)):
    return current

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from filedrop import schemas
from filedrop.core.config import Settings
from filedrop.models.database import get_db
from filedrop.routers.deps import get_settings
from filedrop.services import auth as auth_service

router = APIRouter(tags=["auth"])


@router.post("/register", response_model=schemas.AuthResponse, status_code=201)
def register(
    body: schemas.UserRegister,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    user, token = auth_service.register(
        db,
        settings,
        name=body.name,
        email=body.email,
        password=body.password,
        created_at=body.created_at,
    )
    return {"msg": "User registered successfully", "user": schemas.User.model_validate(user), "token": token}


@router.post("/login", response_model=schemas.AuthResponse)
def login(
    body: schemas.UserLogin,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    user, token = auth_service.login(db, settings, email=body.email, password=body.password)
    return {"msg": "User logged in successfully", "user": schemas.User.model_validate(user), "token": token}

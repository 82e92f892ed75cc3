# marketplace/api/auth.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import crud, schemas
from ..db import get_db
from ..errors import UpstreamError
from ..identity import Caller, IdentityProvider
from ..models import Profile
from ..utils import logger
from .deps import get_current_user, get_identity

router = APIRouter()


@router.post("/signup", status_code=201)
def signup(
    payload: schemas.SignupRequest,
    identity: IdentityProvider = Depends(get_identity),
    db: Session = Depends(get_db),
):
    user, session = identity.register(payload.email, payload.password)
    crud.insert(db, Profile, {
        "id": user.id,
        "email": payload.email,
        "full_name": payload.full_name,
        "phone": payload.phone or "",
        "location": payload.location,
    })
    logger.info("Registered user %s", user.id)
    return {
        "message": "User registered successfully",
        "user": user.public(),
        "session": session.as_dict() if session else None,
    }


@router.post("/login")
def login(
    payload: schemas.LoginRequest,
    identity: IdentityProvider = Depends(get_identity),
    db: Session = Depends(get_db),
):
    user, session = identity.establish_session(payload.email, payload.password)
    profile = crud.select_one(db, Profile, Profile.id == user.id)
    if profile is None:
        raise UpstreamError("Profile not found")
    return {
        "message": "Login successful",
        "user": {
            **user.public(),
            "full_name": profile.full_name,
            "phone": profile.phone,
            "location": profile.location,
        },
        "session": session.as_dict(),
    }


@router.post("/logout")
def logout(
    caller: Caller = Depends(get_current_user),
    identity: IdentityProvider = Depends(get_identity),
):
    identity.invalidate_session(caller.token)
    return {"message": "Logout successful"}


@router.get("/me")
def me(caller: Caller = Depends(get_current_user), db: Session = Depends(get_db)):
    profile = crud.select_one(db, Profile, Profile.id == caller.id)
    return {
        "user": caller.public(),
        "profile": schemas.ProfileOut.model_validate(profile) if profile else None,
    }

import logging

import bcrypt
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from schemas import UserCreate, UserLogin
from storage import Storage, get_storage

logger = logging.getLogger(__name__)

router = APIRouter()


def hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # over-long password or malformed hash
        return False


@router.post("/signup", status_code=201, summary="Create a New User", description="Register a new user with username and password.")
def signup(user: UserCreate, storage: Storage = Depends(get_storage)):
    """
    Register a new user; the password is stored as a bcrypt hash.
    """
    if storage.users.get_by_username(user.username):
        raise HTTPException(status_code=400, detail="Username already exists")
    try:
        storage.users.create(username=user.username, password=hash_password(user.password))
    except IntegrityError:
        raise HTTPException(status_code=400, detail="Username already exists")
    except SQLAlchemyError:
        logger.exception("Failed to create user")
        raise HTTPException(status_code=500, detail="An error occurred while creating the user")
    return {"success": True, "message": "User created successfully", "username": user.username}


@router.post("/login", summary="User Login", description="Login with username and password.")
def login(user: UserLogin, storage: Storage = Depends(get_storage)):
    db_user = storage.users.get_by_username(user.username)
    if not db_user or not verify_password(user.password, db_user.password):
        raise HTTPException(status_code=401, detail="Invalid username or password")
    return {"success": True, "message": "Login successful", "username": user.username}

import re
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Depends, Form, status
from fastapi.security import OAuth2PasswordBearer, OAuth2PasswordRequestForm
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from survey_backend import config
from survey_backend.crud import delete_user, get_user_by_id, get_user_by_username, pwd_context
from survey_backend.database import get_db
from survey_backend.models import User
from survey_backend.schemas import Identity, TokenOut, UserCreate, UserOut

router = APIRouter(prefix="/auth", tags=["auth"])

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")

LOGIN_PATH = "/login"
# In-app destinations a login may send the user back to.
_REDIRECT_RE = re.compile(r"^/surveys?/[A-Za-z0-9_-]+/?$")


def _secret_key() -> str:
    return config.SECRET_KEY or config.require("SECRET_KEY")


def create_access_token(data: dict, expires_delta: timedelta = None):
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta if expires_delta else timedelta(minutes=15))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, _secret_key(), algorithm=config.ALGORITHM)


def token_for_user(user: User) -> str:
    return create_access_token(
        data={
            "sub": user.username,
            "uid": str(user.id),
            "email": user.email,
            "name": user.display_name,
            "role": user.role,
        },
        expires_delta=timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES),
    )


def safe_redirect(target: Optional[str]) -> str:
    """Return `target` when it is a survey path inside this app, "/" otherwise."""
    if target and _REDIRECT_RE.match(target):
        return target
    return "/"


def get_current_user(token: str = Depends(oauth2_scheme)) -> Identity:
    try:
        payload = jwt.decode(token, _secret_key(), algorithms=[config.ALGORITHM])
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    uid = payload.get("uid")
    if not uid:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    return Identity(
        id=uid,
        email=payload.get("email"),
        display_name=payload.get("name"),
        role=payload.get("role") or "user",
    )


def admin_required(current: Identity = Depends(get_current_user)) -> Identity:
    if current.role != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Insufficient privileges"
        )
    return current


@router.post("/login", response_model=TokenOut)
async def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    next_url: Optional[str] = Form(None, alias="next"),
    db: AsyncSession = Depends(get_db)
):
    user = await get_user_by_username(db, form_data.username)
    if not user or not pwd_context.verify(form_data.password, user.hashed_password):
        raise HTTPException(status_code=401, detail="Incorrect username or password")
    return TokenOut(access_token=token_for_user(user), redirect_to=safe_redirect(next_url))


@router.get("/me", response_model=Identity)
def read_users_me(current: Identity = Depends(get_current_user)):
    return current


@router.post("/logout")
def logout(current: Identity = Depends(get_current_user)):
    # Tokens are stateless; the client drops its copy and returns to the login page.
    return {"redirect_to": LOGIN_PATH}


@router.post("/create-user")
async def create_user_endpoint(
    request: UserCreate,
    admin: Identity = Depends(admin_required),
    db: AsyncSession = Depends(get_db)
):
    existing_user = await get_user_by_username(db, request.username)
    if existing_user:
        raise HTTPException(status_code=400, detail="Username already exists")

    user_data = request.model_dump()
    plain_password = user_data.pop("password")
    user_data["hashed_password"] = pwd_context.hash(plain_password)

    new_user = User(**user_data)
    db.add(new_user)
    await db.commit()
    await db.refresh(new_user)
    return {"message": f"User {new_user.username} created with role {new_user.role}"}


@router.get("/check-username")
async def check_username(username: str, db: AsyncSession = Depends(get_db)):
    existing_user = await get_user_by_username(db, username)
    return {"exists": bool(existing_user)}


@router.get("/users", response_model=List[UserOut])
async def list_users(
    admin: Identity = Depends(admin_required),
    db: AsyncSession = Depends(get_db)
):
    result = await db.execute(select(User))
    return result.scalars().all()


@router.delete("/users/{user_id}")
async def delete_user_endpoint(
    user_id: int,
    admin: Identity = Depends(admin_required),
    db: AsyncSession = Depends(get_db)
):
    user = await get_user_by_id(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    # The primary admin account stays.
    if user.username.lower() == "admin":
        raise HTTPException(status_code=403, detail="Cannot delete the primary admin user")
    await delete_user(db, user)
    return {"message": f"User {user.username} deleted"}

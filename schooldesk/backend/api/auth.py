import logging
from fastapi import APIRouter, Depends, HTTPException, status, Response, Request
from fastapi.security import OAuth2PasswordBearer, OAuth2PasswordRequestForm
from datetime import datetime, timedelta, timezone
from uuid import uuid4
import jwt
from pydantic import ValidationError

from .schemas.user import Token, TokenData, LoginRequest, UserResponse, LoginResponse, PasswordChangeRequest
from ..models.db_models import User
from ..models.redis_models import UserSessionRedis
from ..db.redis_client import RedisClient
from ..db.stores.users import UsersStore
from ..config.config import settings
from .dependencies import get_redis_client, get_users_store
from .utilities.limiter import limiter

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"]
)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/token")

MIN_PASSWORD_LENGTH = 6


def create_access_token(data: dict, expires_delta: timedelta):
    """Creates a signed JWT carrying `data` that expires after `expires_delta`."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    return encoded_jwt


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    redis_client: RedisClient = Depends(get_redis_client)
) -> User:
    """
    Decodes the token, validates its payload and checks that the user still
    has a live session in Redis. The session's copy of the account is what
    handlers receive.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        token_data = TokenData.model_validate(payload)

        if token_data.user_id is None:
            logger.warning(f"Token is valid but missing 'user_id': {payload}")
            raise credentials_exception

        user_session = await redis_client.get_user_session(token_data.user_id)
        if user_session is None:
            logger.warning(f"User '{token_data.user_id}' has a valid token but no active session. Denying access.")
            raise credentials_exception

        if user_session.user_data.status != "active":
            logger.warning(f"Session of user '{token_data.user_id}' belongs to an account that is no longer active.")
            await redis_client.delete_user_session(token_data.user_id)
            raise credentials_exception

        return user_session.user_data

    except (jwt.PyJWTError, ValidationError) as e:
        logger.warning(f"Token validation error: {e}")
        raise credentials_exception


def require_admin(user: User = Depends(get_current_user)) -> User:
    if user.role != "admin":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="This operation is only available to administrators.")
    return user


def require_staff(user: User = Depends(get_current_user)) -> User:
    if user.role not in ("admin", "teacher"):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="This operation is only available to staff.")
    return user


async def _perform_login(email: str, password: str, users: UsersStore, redis_client: RedisClient) -> LoginResponse:
    """Shared login path of the JSON and the OAuth2 form endpoints."""
    email = email.strip().lower()
    logger.info(f"Login attempt for '{email}'.")
    try:
        user = await users.get_by_email(email)
    except Exception as e:
        logger.error(f"Unexpected error during login: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="An unexpected server error occurred during login.")

    if user is None:
        logger.warning(f"Login rejected for '{email}': unknown email.")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    if user.password != password:
        logger.warning(f"Login rejected for '{email}': wrong password.")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid password")
    if user.status != "active":
        logger.warning(f"Login rejected for '{email}': account is {user.status}.")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is inactive")

    ttl = settings.SESSION_TTL_SECONDS
    now = datetime.now(timezone.utc)
    session = UserSessionRedis(
        user_data=user,
        session_id=uuid4(),
        session_start_time=now,
        session_end_time=now + timedelta(seconds=ttl),
    )
    try:
        await redis_client.save_user_session(session, ttl=ttl)
    except Exception as e:
        logger.error(f"Could not store the session of '{email}': {e}", exc_info=True)
        raise HTTPException(status_code=503, detail="The session store is currently unavailable.")

    access_token = create_access_token(
        data={"user_id": str(user.id)},
        expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )
    logger.info(f"User '{email}' ({user.role}) logged in successfully.")
    return LoginResponse(token=Token(access_token=access_token), user=UserResponse.model_validate(user))


@router.post("/token", response_model=Token)
@limiter.limit("30/minute")
async def login_for_access_token(
    request: Request,
    form_data: OAuth2PasswordRequestForm = Depends(),
    users: UsersStore = Depends(get_users_store),
    redis_client: RedisClient = Depends(get_redis_client)
):
    """Standard OAuth2 endpoint for Swagger UI; the username is the email."""
    login_response = await _perform_login(form_data.username, form_data.password, users, redis_client)
    return login_response.token


@router.post("/login", response_model=LoginResponse)
@limiter.limit("30/minute")
async def login(
    request: Request,
    login_request: LoginRequest,
    users: UsersStore = Depends(get_users_store),
    redis_client: RedisClient = Depends(get_redis_client)
):
    return await _perform_login(login_request.email, login_request.password, users, redis_client)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit("60/minute")
async def logout(
    request: Request,
    redis_client: RedisClient = Depends(get_redis_client),
    current_user: User = Depends(get_current_user)
):
    """Ends the session; the token stops working immediately."""
    logger.info(f"User '{current_user.id}' logging out.")
    try:
        await redis_client.delete_user_session(current_user.id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except Exception:
        logger.error(f"Error during logout for user '{current_user.id}'.", exc_info=True)
        raise HTTPException(status_code=500, detail="An error occurred during logout.")


@router.get("/me", response_model=UserResponse)
@limiter.limit("120/minute")
async def me(request: Request, current_user: User = Depends(get_current_user)):
    return current_user


@router.post("/password", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit("10/minute")
async def change_password(
    request: Request,
    body: PasswordChangeRequest,
    current_user: User = Depends(get_current_user),
    users: UsersStore = Depends(get_users_store),
    redis_client: RedisClient = Depends(get_redis_client)
):
    """Changes the signed-in user's password and refreshes the live session."""
    stored = await users.get_by_id(current_user.id)
    if stored is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    if stored.password != body.current_password:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Current password is incorrect")
    if len(body.new_password) < MIN_PASSWORD_LENGTH:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"New password must be at least {MIN_PASSWORD_LENGTH} characters")
    if body.new_password != body.confirm_password:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="New passwords do not match")

    await users.update(current_user.id, {"password": body.new_password})
    session = await redis_client.get_user_session(current_user.id)
    if session is not None:
        session.user_data = stored.model_copy(update={"password": body.new_password})
        await redis_client.refresh_user_session(session)
    logger.info(f"User '{current_user.id}' changed their password.")
    return Response(status_code=status.HTTP_204_NO_CONTENT)

from typing import Optional
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jwt.exceptions import PyJWTError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.config import settings
from app.core.redis import redis_client
from app.core.security import decode_access_token
from app.db.models import DoctorProfile, PatientProfile, User
from app.db.session import get_session
from app.schemas.auth import SessionContext

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/login")


async def resolve_session_context(token: str, session: AsyncSession) -> SessionContext:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = decode_access_token(token)
        user_id: Optional[str] = payload.get("sub")
        if user_id is None:
            raise credentials_exception
    except PyJWTError:
        raise credentials_exception

    # Logged-out tokens are removed from Redis
    if await redis_client.get_token(token) is None:
        raise credentials_exception

    user = await session.get(User, jwt_subject_to_uuid(user_id, credentials_exception))
    if user is None:
        raise credentials_exception

    profile_model = DoctorProfile if user.role == "doctor" else PatientProfile
    result = await session.execute(select(profile_model.id).where(profile_model.user_id == user.id))
    profile_id = result.scalars().first()

    return SessionContext(
        user_id=user.id,
        email=user.email,
        role=user.role,
        profile_id=profile_id,
        token=token,
    )


def jwt_subject_to_uuid(subject: str, error: HTTPException) -> UUID:
    try:
        return UUID(subject)
    except ValueError:
        raise error


async def get_session_context(
    token: str = Depends(oauth2_scheme),
    session: AsyncSession = Depends(get_session)
) -> SessionContext:
    return await resolve_session_context(token, session)


async def require_doctor(ctx: SessionContext = Depends(get_session_context)) -> SessionContext:
    if not ctx.is_doctor:
        raise HTTPException(status_code=403, detail="Doctor access required")
    return ctx


async def require_patient(ctx: SessionContext = Depends(get_session_context)) -> SessionContext:
    if not ctx.is_patient:
        raise HTTPException(status_code=403, detail="Patient access required")
    return ctx


def require_profile(ctx: SessionContext):
    if ctx.profile_id is None:
        raise HTTPException(status_code=404, detail="Profile not found. Please complete your profile setup first.")
    return ctx.profile_id


async def require_doctor_profile(ctx: SessionContext = Depends(require_doctor)) -> SessionContext:
    require_profile(ctx)
    return ctx


async def require_patient_profile(ctx: SessionContext = Depends(require_patient)) -> SessionContext:
    require_profile(ctx)
    return ctx

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_session_context
from app.db.session import get_session
from app.schemas.auth import LoginRequest, LoginResponse, SessionContext, SignupRequest, UserInfo
from app.schemas.user import UserResponse
from app.services.auth_service import AuthService

router = APIRouter()

@router.post("/signup", response_model=UserResponse, status_code=201)
async def signup(
    signup_data: SignupRequest,
    session: AsyncSession = Depends(get_session)
):
    service = AuthService(session)
    return await service.signup(signup_data)

@router.post("/login", response_model=LoginResponse)
async def login(
    login_data: LoginRequest,
    session: AsyncSession = Depends(get_session)
):
    service = AuthService(session)
    return await service.login(login_data)

@router.post("/logout")
async def logout(
    ctx: SessionContext = Depends(get_session_context),
    session: AsyncSession = Depends(get_session)
):
    service = AuthService(session)
    return await service.logout(ctx)

@router.get("/me", response_model=UserInfo)
async def read_me(ctx: SessionContext = Depends(get_session_context)):
    return UserInfo(id=ctx.user_id, email=ctx.email, role=ctx.role, profile_id=ctx.profile_id)

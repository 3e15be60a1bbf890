import json
from datetime import timedelta
from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.config import settings
from app.core.logger import logger
from app.core.redis import redis_client
from app.core.security import verify_password, get_password_hash, create_access_token
from app.db.models import User, DoctorProfile, PatientProfile
from app.schemas.auth import SignupRequest, LoginRequest, LoginResponse, UserInfo, SessionContext

class AuthService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_user_by_email(self, email: str) -> User | None:
        stmt = select(User).where(User.email == email.lower())
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def signup(self, data: SignupRequest) -> User:
        if await self.get_user_by_email(data.email):
            raise HTTPException(status_code=400, detail="An account with this email already exists")

        user = User(
            email=data.email.lower(),
            password_hash=get_password_hash(data.password),
            role=data.role
        )
        self.session.add(user)
        await self.session.commit()
        await self.session.refresh(user)
        logger.info(f"Registered {user.role} account {user.id}")
        return user

    async def login(self, login_data: LoginRequest) -> LoginResponse:
        # 1. Find user
        user = await self.get_user_by_email(login_data.email)
        if not user or not verify_password(login_data.password, user.password_hash):
            raise HTTPException(status_code=401, detail="Invalid email or password")

        # 2. Portal gating: a doctor cannot sign in through the patient portal and vice versa
        if login_data.role and login_data.role != user.role:
            raise HTTPException(status_code=403, detail=f"This account is not registered as a {login_data.role}")

        # 3. Generate token
        access_token_expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        access_token = create_access_token(
            data={"sub": str(user.id), "role": user.role}, expires_delta=access_token_expires
        )

        # 4. Store in Redis
        token_data = {
            "user_id": str(user.id),
            "role": user.role,
        }
        await redis_client.set_token(
            access_token,
            json.dumps(token_data),
            settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60
        )

        profile_model = DoctorProfile if user.role == "doctor" else PatientProfile
        result = await self.session.execute(select(profile_model.id).where(profile_model.user_id == user.id))

        return LoginResponse(
            access_token=access_token,
            token_type="bearer",
            user=UserInfo(
                id=user.id,
                email=user.email,
                role=user.role,
                profile_id=result.scalars().first()
            )
        )

    async def logout(self, ctx: SessionContext) -> dict:
        await redis_client.delete_token(ctx.token)
        return {"message": "Logged out"}

import logging

from fastapi import status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from academy.auth.models import User
from academy.auth.schemas import LoginRequest, LoginResponse, UserInfo
from academy.auth.security import create_access_token, verify_password
from academy.core.exceptions import ServiceError

logger = logging.getLogger(__name__)


async def login_user(db: AsyncSession, payload: LoginRequest) -> LoginResponse:
    result = await db.execute(select(User).where(User.email == payload.email))
    user = result.scalar_one_or_none()
    if not user or not verify_password(payload.password, user.password_hash):
        logger.info("Failed login for %s", payload.email)
        raise ServiceError("Invalid email or password", status.HTTP_401_UNAUTHORIZED)
    if user.status != "ACTIVE":
        raise ServiceError("User account is inactive", status.HTTP_403_FORBIDDEN)

    access_token = create_access_token(
        subject={"sub": str(user.id), "user_id": str(user.id), "role": user.role}
    )
    return LoginResponse(
        access_token=access_token,
        user=UserInfo(id=user.id, name=user.name, email=user.email, role=user.role),
    )

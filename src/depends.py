from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from src.adapter.services.administrator_roster import SqlAdministratorRoster
from src.adapter.services.identity_service import HttpIdentityService
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.error import raise_for_error
from src.api.utils.jwt import verify_jwt
from src.app.services.administrator_roster import AdministratorRoster
from src.app.services.identity_safety_guard import IdentitySafetyGuard
from src.app.services.identity_service import IIdentityService
from src.app.services.orchestrator_settings import OrchestratorSettings
from src.domain.errors import ProvisioningError

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

security = HTTPBearer()

administrator_roster = SqlAdministratorRoster(
    AsyncSessionLocal, cache_seconds=ApplicationConfig.ADMIN_ROSTER_CACHE_SECONDS
)
identity_service = HttpIdentityService(
    ApplicationConfig.IDENTITY_SERVICE_URL,
    api_key=ApplicationConfig.IDENTITY_SERVICE_API_KEY,
    timeout_seconds=ApplicationConfig.IDENTITY_SERVICE_TIMEOUT_SECONDS,
)
orchestrator_settings = OrchestratorSettings.from_config(ApplicationConfig)


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


def get_identity_service() -> IIdentityService:
    return identity_service


def get_administrator_roster() -> AdministratorRoster:
    return administrator_roster


def get_orchestrator_settings() -> OrchestratorSettings:
    return orchestrator_settings


async def get_current_actor(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> UUID:
    """
    Dependency to extract and verify the actor JWT from the Authorization header.

    Returns:
        The actor's user id

    Raises:
        HTTPException: 401 if token is invalid or expired
    """
    payload = verify_jwt(credentials.credentials)

    if payload is None or "user_id" not in payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )

    try:
        return UUID(payload["user_id"])
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )


async def get_current_administrator(
    actor_id: UUID = Depends(get_current_actor),
    roster: AdministratorRoster = Depends(get_administrator_roster),
) -> UUID:
    """Actor id, provided the actor is on the administrator roster (403 otherwise)"""
    try:
        await IdentitySafetyGuard(roster).ensure_actor_is_administrator(actor_id)
    except ProvisioningError as e:
        raise_for_error(e.to_error())
    return actor_id

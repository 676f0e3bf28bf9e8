"""Client, domain and user lookups.

These records are provisioned by the registration service and the identity
frontend; this service only reads them.
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cpa_auth.core.logging import get_logger
from cpa_auth.db.models import Client, Domain, User
from cpa_auth.models.domain import ClientEntry, DomainEntry, UserEntry

logger = get_logger(__name__)


class ClientRepository:
    """Repository for registered clients."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, client_id: str) -> Optional[ClientEntry]:
        """Retrieve a client by its identifier."""
        result = await self.session.execute(select(Client).where(Client.id == client_id))
        entry = result.scalar_one_or_none()

        logger.debug(
            "db_query_complete",
            operation="get_client",
            client_id=client_id,
            found=entry is not None,
        )

        return ClientEntry.model_validate(entry) if entry else None


class DomainRepository:
    """Repository for service domains."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_name(self, name: str) -> Optional[DomainEntry]:
        result = await self.session.execute(select(Domain).where(Domain.name == name))
        entry = result.scalar_one_or_none()
        return DomainEntry.model_validate(entry) if entry else None

    async def get_by_id(self, domain_id: int) -> Optional[DomainEntry]:
        result = await self.session.execute(select(Domain).where(Domain.id == domain_id))
        entry = result.scalar_one_or_none()
        return DomainEntry.model_validate(entry) if entry else None


class UserRepository:
    """Repository for resource owners."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, user_id: int) -> Optional[UserEntry]:
        result = await self.session.execute(select(User).where(User.id == user_id))
        entry = result.scalar_one_or_none()
        return UserEntry.model_validate(entry) if entry else None

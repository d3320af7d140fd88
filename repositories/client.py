from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_execute, session_flush
from models.client import Client, ClientDTO


class ClientRepository:

    @staticmethod
    async def get_by_email(email: str, session: AsyncSession | Session) -> ClientDTO | None:
        stmt = select(Client).where(func.lower(Client.email) == email.strip().lower())
        client = await session_execute(stmt, session)
        client = client.scalars().first()
        if client is not None:
            return ClientDTO.model_validate(client, from_attributes=True)
        else:
            return client

    @staticmethod
    async def create(client_dto: ClientDTO, session: AsyncSession | Session) -> int:
        client = Client(**client_dto.model_dump(exclude={"id", "created_at"}))
        session.add(client)
        await session_flush(session)
        return client.id

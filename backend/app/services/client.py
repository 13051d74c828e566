from __future__ import annotations

from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from app.core.errors import NotFoundError, UpstreamError
from app.core.logging_setup import logger
from app.models.base import utcnow
from app.models.client import Client
from app.schemas.client import ClientCreate, ClientUpdate


class ClientService:
    def __init__(self, session: Session) -> None:
        self.session = session

    def create_client(self, coach_id: UUID, payload: ClientCreate) -> Client:
        data = payload.model_dump()
        data["full_name"] = data["full_name"].strip()
        client = Client(coach_id=coach_id, **data)
        self.session.add(client)
        self._commit("create client")
        self.session.refresh(client)
        logger.info("Client %s created by coach %s", client.id, coach_id)
        return client

    def list_clients(self, coach_id: UUID) -> list[Client]:
        statement = select(Client).where(Client.coach_id == coach_id).order_by(Client.full_name)
        return list(self.session.exec(statement).all())

    def get_owned_client(self, client_id: UUID, coach_id: UUID) -> Client:
        client = self.session.get(Client, client_id)
        if client is None or client.coach_id != coach_id:
            raise NotFoundError("Client not found")
        return client

    def find_by_name(self, coach_id: UUID, full_name: str) -> Client | None:
        statement = select(Client).where(Client.coach_id == coach_id, Client.full_name == full_name.strip())
        return self.session.exec(statement).first()

    def update_client(self, client_id: UUID, coach_id: UUID, payload: ClientUpdate) -> Client:
        client = self.get_owned_client(client_id, coach_id)
        for field, value in payload.model_dump(exclude_unset=True).items():
            if field == "full_name":
                if value is None:
                    continue
                value = value.strip()
            setattr(client, field, value)
        client.updated_at = utcnow()
        self.session.add(client)
        self._commit("update client")
        self.session.refresh(client)
        return client

    def _commit(self, action: str) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error("Failed to %s: %s", action, exc)
            raise UpstreamError(f"Failed to {action}") from exc

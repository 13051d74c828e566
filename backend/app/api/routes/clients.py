from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from app.api.deps import get_current_active_user, get_db
from app.models.user import User
from app.schemas.client import ClientCreate, ClientRead, ClientUpdate
from app.services.client import ClientService

router = APIRouter(prefix="/clients", tags=["clients"])


@router.get("", response_model=list[ClientRead])
def list_clients(
    session: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> list[ClientRead]:
    clients = ClientService(session).list_clients(current_user.id)
    return [ClientRead.model_validate(client) for client in clients]


@router.post("", response_model=ClientRead, status_code=status.HTTP_201_CREATED)
def create_client(
    payload: ClientCreate,
    session: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> ClientRead:
    client = ClientService(session).create_client(current_user.id, payload)
    return ClientRead.model_validate(client)


@router.get("/{client_id}", response_model=ClientRead)
def get_client(
    client_id: UUID,
    session: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> ClientRead:
    client = ClientService(session).get_owned_client(client_id, current_user.id)
    return ClientRead.model_validate(client)


@router.patch("/{client_id}", response_model=ClientRead)
def update_client(
    client_id: UUID,
    payload: ClientUpdate,
    session: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> ClientRead:
    client = ClientService(session).update_client(client_id, current_user.id, payload)
    return ClientRead.model_validate(client)

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from pm_system.api.deps import AUTH_DEP, ID_PATH, SESSION_DEP
from pm_system.core.time import as_naive_utc
from pm_system.schemas.clients import ClientCreate, ClientRead, ClientUpdate
from pm_system.schemas.common import ID_MAX, ID_MIN, MessageResponse
from pm_system.services import clients as client_service
from pm_system.services.auth import AuthContext
from pm_system.services.clients import ClientFilters

router = APIRouter(prefix="/clients", tags=["clients"])


def _client_filters(
    industry: str | None = Query(default=None),
    status: str | None = Query(default=None),
    location: str | None = Query(default=None),
    assigned_recruiter_id: int | None = Query(
        default=None, alias="assignedRecruiterId", ge=ID_MIN, le=ID_MAX
    ),
    date_added_from: datetime | None = Query(default=None, alias="dateAddedFrom"),
    date_added_to: datetime | None = Query(default=None, alias="dateAddedTo"),
    client_type: str | None = Query(default=None, alias="clientType"),
    is_active: bool | None = Query(default=None, alias="isActive"),
    search: str | None = Query(default=None),
    sort: str | None = Query(default=None),
) -> ClientFilters:
    return ClientFilters(
        industry=industry,
        status=status,
        location=location,
        assigned_recruiter_id=assigned_recruiter_id,
        date_added_from=as_naive_utc(date_added_from),
        date_added_to=as_naive_utc(date_added_to),
        client_type=client_type,
        is_active=is_active,
        search=search,
        sort=sort,
    )


FILTERS_DEP = Depends(_client_filters)


@router.get("", response_model=list[ClientRead])
def list_clients(
    filters: ClientFilters = FILTERS_DEP,
    session: Session = SESSION_DEP,
    _auth: AuthContext = AUTH_DEP,
) -> list[ClientRead]:
    return client_service.list_clients(session, filters)


@router.post("", response_model=ClientRead)
def create_client(
    payload: ClientCreate,
    session: Session = SESSION_DEP,
    _auth: AuthContext = AUTH_DEP,
) -> ClientRead:
    return client_service.create_client(session, payload)


@router.get("/{client_id}", response_model=ClientRead)
def get_client(
    client_id: int = ID_PATH, session: Session = SESSION_DEP, _auth: AuthContext = AUTH_DEP
) -> ClientRead:
    return client_service.get_client(session, client_id)


@router.put("/{client_id}", response_model=ClientRead)
def update_client(
    payload: ClientUpdate,
    client_id: int = ID_PATH,
    session: Session = SESSION_DEP,
    _auth: AuthContext = AUTH_DEP,
) -> ClientRead:
    return client_service.update_client(session, client_id, payload)


@router.delete("/{client_id}", response_model=MessageResponse)
def delete_client(
    client_id: int = ID_PATH, session: Session = SESSION_DEP, _auth: AuthContext = AUTH_DEP
) -> MessageResponse:
    client_service.delete_client(session, client_id)
    return MessageResponse(message="Client deleted successfully")

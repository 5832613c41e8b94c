from datetime import datetime

import pytest

from pm_system.core.errors import (
    ConflictError,
    InvalidReferenceError,
    NotFoundError,
    PreconditionFailedError,
)
from pm_system.models import Client
from pm_system.schemas.clients import ClientCreate, ClientUpdate
from pm_system.services import clients as client_service
from pm_system.services.clients import ClientFilters


def test_create_clients_with_distinct_emails(session):
    first = client_service.create_client(
        session, ClientCreate(name="Acme", company_name="Acme Inc", email="a@x.com")
    )
    second = client_service.create_client(
        session, ClientCreate(name="Globex", company_name="Globex Corp", email="g@x.com")
    )
    assert first.id != second.id
    assert first.total_projects == 0
    assert first.client_type == "New"
    assert first.status == "Active"


def test_create_client_with_used_email_is_a_conflict(session):
    client_service.create_client(session, ClientCreate(name="Acme", company_name="Acme Inc", email="a@x.com"))

    with pytest.raises(ConflictError):
        client_service.create_client(
            session, ClientCreate(name="Other", company_name="Other Ltd", email="a@x.com")
        )
    assert len(client_service.list_clients(session)) == 1


def test_recruiter_must_be_an_active_user(session, make_user):
    inactive = make_user("retired", is_active=False)

    with pytest.raises(InvalidReferenceError):
        client_service.create_client(
            session,
            ClientCreate(name="Acme", company_name="Acme Inc", email="a@x.com", assigned_recruiter_id=999),
        )
    with pytest.raises(InvalidReferenceError):
        client_service.create_client(
            session,
            ClientCreate(
                name="Acme", company_name="Acme Inc", email="a@x.com", assigned_recruiter_id=inactive.id
            ),
        )
    assert client_service.list_clients(session) == []


def test_recruiter_name_is_snapshotted_from_user(session, make_user):
    recruiter = make_user("rita")

    created = client_service.create_client(
        session,
        ClientCreate(
            name="Acme", company_name="Acme Inc", email="a@x.com", assigned_recruiter_id=recruiter.id
        ),
    )
    assert created.assigned_recruiter_id == recruiter.id
    assert created.assigned_recruiter_name == "rita"

    # A later rename does not reach historical snapshots.
    recruiter.username = "rita.renamed"
    session.add(recruiter)
    session.commit()
    assert client_service.get_client(session, created.id).assigned_recruiter_name == "rita"


def test_explicit_recruiter_name_is_kept(session, make_user):
    recruiter = make_user("rita")
    created = client_service.create_client(
        session,
        ClientCreate(
            name="Acme",
            company_name="Acme Inc",
            email="a@x.com",
            assigned_recruiter_id=recruiter.id,
            assigned_recruiter_name="Rita M.",
        ),
    )
    assert created.assigned_recruiter_name == "Rita M."


def test_update_is_partial_and_checks_email_against_others(session, make_client):
    acme = make_client("a@x.com", company_name="Acme Inc", phone="555-0100")
    make_client("g@x.com", company_name="Globex Corp")

    updated = client_service.update_client(session, acme.id, ClientUpdate(location="Pune"))
    assert updated.location == "Pune"
    assert updated.phone == "555-0100"

    # Re-submitting its own email is fine.
    client_service.update_client(session, acme.id, ClientUpdate(email="a@x.com"))

    with pytest.raises(ConflictError):
        client_service.update_client(session, acme.id, ClientUpdate(email="g@x.com"))


def test_update_can_clear_recruiter(session, make_user, make_client):
    recruiter = make_user("rita")
    acme = make_client("a@x.com", assigned_recruiter_id=recruiter.id, assigned_recruiter_name="rita")

    updated = client_service.update_client(session, acme.id, ClientUpdate(assigned_recruiter_id=None))
    assert updated.assigned_recruiter_id is None
    assert updated.assigned_recruiter_name == ""


def test_recruiter_name_without_recruiter_is_ignored(session, make_user, make_client):
    acme = make_client("a@x.com")

    updated = client_service.update_client(session, acme.id, ClientUpdate(assigned_recruiter_name="Ghost"))
    assert updated.assigned_recruiter_id is None
    assert updated.assigned_recruiter_name == ""

    recruiter = make_user("rita")
    client_service.update_client(session, acme.id, ClientUpdate(assigned_recruiter_id=recruiter.id))
    renamed = client_service.update_client(session, acme.id, ClientUpdate(assigned_recruiter_name="Rita M."))
    assert (renamed.assigned_recruiter_id, renamed.assigned_recruiter_name) == (recruiter.id, "Rita M.")


def test_update_missing_client_is_not_found(session):
    with pytest.raises(NotFoundError):
        client_service.update_client(session, 42, ClientUpdate(name="x"))


def test_delete_client_with_projects_reports_blocking_count(session, make_user, make_client, make_project):
    lead = make_user("lead")
    acme = make_client("a@x.com")
    make_project(acme, lead, name="One")
    make_project(acme, lead, name="Two")

    with pytest.raises(PreconditionFailedError) as excinfo:
        client_service.delete_client(session, acme.id)
    assert excinfo.value.extra["project_count"] == 2
    assert session.get(Client, acme.id) is not None


def test_delete_client_without_projects(session, make_client):
    acme = make_client("a@x.com")
    client_service.delete_client(session, acme.id)
    with pytest.raises(NotFoundError):
        client_service.get_client(session, acme.id)


def test_list_reports_project_counts(session, make_user, make_client, make_project):
    lead = make_user("lead")
    acme = make_client("a@x.com", company_name="Acme Inc")
    globex = make_client("g@x.com", company_name="Globex Corp")
    make_project(acme, lead, name="One", status="Ongoing")
    make_project(acme, lead, name="Two", status="Completed")
    make_project(acme, lead, name="Three", status="OnHold")

    by_id = {c.id: c for c in client_service.list_clients(session)}
    acme_read = by_id[acme.id]
    assert (acme_read.total_projects, acme_read.ongoing_projects, acme_read.completed_projects) == (3, 1, 1)
    assert by_id[globex.id].total_projects == 0

    ranked = client_service.list_clients(session, ClientFilters(sort="mostProjects"))
    assert [c.id for c in ranked] == [acme.id, globex.id]


def test_list_filters_are_combined(session, make_user, make_client):
    recruiter = make_user("rita")
    make_client("a@x.com", company_name="Acme Inc", industry="IT", location="Pune, MH", status="Active")
    make_client(
        "b@x.com",
        company_name="Beta LLC",
        industry="IT",
        location="Mumbai",
        status="Inactive",
        assigned_recruiter_id=recruiter.id,
    )
    make_client("c@x.com", company_name="Gamma Legal", industry="Legal", location="Pune")

    def names(**kwargs):
        return sorted(c.company_name for c in client_service.list_clients(session, ClientFilters(**kwargs)))

    assert names(industry="it") == ["Acme Inc", "Beta LLC"]
    assert names(location="pune") == ["Acme Inc", "Gamma Legal"]
    assert names(industry="IT", location="pune") == ["Acme Inc"]
    assert names(status="inactive") == ["Beta LLC"]
    assert names(assigned_recruiter_id=recruiter.id) == ["Beta LLC"]


def test_list_search_is_case_insensitive_across_fields(session, make_client):
    make_client("hello@acme.com", company_name="Acme Inc", name="Alice")
    make_client("b@x.com", company_name="Beta LLC", name="Bob", location="Acmeville")
    make_client("c@x.com", company_name="Gamma", name="Carol")

    results = client_service.list_clients(session, ClientFilters(search="ACME"))
    assert sorted(c.company_name for c in results) == ["Acme Inc", "Beta LLC"]

    results = client_service.list_clients(session, ClientFilters(search="carol"))
    assert [c.company_name for c in results] == ["Gamma"]


def test_list_search_treats_wildcards_literally(session, make_client):
    make_client("a@x.com", company_name="100% Growth")
    make_client("b@x.com", company_name="Other")

    results = client_service.list_clients(session, ClientFilters(search="%"))
    assert [c.company_name for c in results] == ["100% Growth"]


def test_list_date_added_range(session, make_client):
    make_client("a@x.com", company_name="Old Co", date_added=datetime(2023, 6, 1))
    make_client("b@x.com", company_name="New Co", date_added=datetime(2024, 6, 1))

    results = client_service.list_clients(
        session,
        ClientFilters(date_added_from=datetime(2024, 1, 1), date_added_to=datetime(2024, 12, 31)),
    )
    assert [c.company_name for c in results] == ["New Co"]


def test_list_date_added_upper_bound_with_time_is_exact(session, make_client):
    make_client("a@x.com", company_name="Morning Co", date_added=datetime(2024, 1, 31, 9, 0))
    make_client("b@x.com", company_name="Evening Co", date_added=datetime(2024, 1, 31, 18, 0))

    results = client_service.list_clients(
        session, ClientFilters(date_added_to=datetime(2024, 1, 31, 12, 0))
    )
    assert [c.company_name for c in results] == ["Morning Co"]


# HTTP


def test_client_endpoints(api, manager_headers):
    resp = api.post(
        "/clients",
        json={"name": "Acme", "companyName": "Acme Inc", "email": "a@x.com"},
        headers=manager_headers,
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["totalProjects"] == 0
    assert body["companyName"] == "Acme Inc"
    client_id = body["id"]

    resp = api.post(
        "/clients",
        json={"name": "Again", "companyName": "Again Inc", "email": "a@x.com"},
        headers=manager_headers,
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "conflict"

    resp = api.put(f"/clients/{client_id}", json={"industry": "IT"}, headers=manager_headers)
    assert resp.status_code == 200
    assert resp.json()["industry"] == "IT"
    assert resp.json()["name"] == "Acme"

    resp = api.get("/clients", params={"industry": "IT", "search": "acme"}, headers=manager_headers)
    assert [c["id"] for c in resp.json()] == [client_id]

    resp = api.delete(f"/clients/{client_id}", headers=manager_headers)
    assert resp.status_code == 200
    assert api.get(f"/clients/{client_id}", headers=manager_headers).status_code == 404


def test_delete_client_endpoint_reports_project_count(
    api, manager, manager_headers, make_client, make_project
):
    acme = make_client("a@x.com")
    make_project(acme, manager)

    resp = api.delete(f"/clients/{acme.id}", headers=manager_headers)
    assert resp.status_code == 400
    assert resp.json()["error"] == "precondition_failed"
    assert resp.json()["projectCount"] == 1


def test_date_only_upper_bound_includes_that_whole_day(api, manager_headers, make_client):
    make_client("early@x.com", company_name="Early Co", date_added=datetime(2023, 12, 31, 23, 0))
    make_client("late@x.com", company_name="Late Co", date_added=datetime(2024, 1, 31, 15, 30))
    make_client("feb@x.com", company_name="Feb Co", date_added=datetime(2024, 2, 1, 0, 0))

    resp = api.get(
        "/clients",
        params={"dateAddedFrom": "2024-01-01", "dateAddedTo": "2024-01-31"},
        headers=manager_headers,
    )
    assert resp.status_code == 200
    assert [c["email"] for c in resp.json()] == ["late@x.com"]


def test_client_id_beyond_64_bits_is_rejected(api, manager_headers):
    resp = api.get("/clients/99999999999999999999", headers=manager_headers)
    assert resp.status_code == 400
    assert resp.json()["error"] == "validation_error"

    resp = api.get("/clients", params={"assignedRecruiterId": 2**64}, headers=manager_headers)
    assert resp.status_code == 400

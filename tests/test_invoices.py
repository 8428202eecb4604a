import re
from datetime import datetime, timezone
from decimal import Decimal

import pytest
from fastapi import HTTPException

from billdesk.core.access import IdentityClaims, RequestContext
from billdesk.core.config import settings
from billdesk.models.clients import Client, Invoice, InvoiceStatus
from billdesk.models.documents import InvoiceDocument
from billdesk.schemas.common import PaginationParams
from billdesk.schemas.invoices import InvoiceAmount, InvoiceFilter
from billdesk.services.invoice_service import InvoiceService, new_invoice_number

API = settings.API_PREFIX
CTX = RequestContext(claims=IdentityClaims(sub="tester", role="ACCOUNTS"))


@pytest.fixture
def acme(db):
    client = Client(name="Acme Studio", address="12 Canal St")
    db.add(client)
    db.commit()
    db.refresh(client)
    return client


def post_invoice(client, headers, client_id, amount="250.00", **extra):
    return client.post(
        f"{API}/invoices",
        json={"client_id": client_id, "amount": amount, **extra},
        headers=headers,
    )


def test_invoice_for_unknown_client_fails(client, db, as_accounts):
    response = post_invoice(client, as_accounts, client_id=404)

    assert response.status_code == 404
    assert db.query(Invoice).count() == 0


def test_invoice_is_created_pending_and_listed_under_its_client(client, as_accounts, acme):
    created = post_invoice(client, as_accounts, acme.id, currency="eur").json()

    assert created["status"] == "PENDING"
    assert created["client_id"] == acme.id
    assert Decimal(created["amount"]) == Decimal("250.00")
    assert created["currency"] == "EUR"
    assert re.fullmatch(r"INV-\d{8}-[0-9A-F]{8}", created["number"])
    assert created["version"] == 1

    listed = client.get(f"{API}/clients/{acme.id}/invoices", headers=as_accounts).json()
    assert [i["id"] for i in listed] == [created["id"]]


def test_invoice_number_uses_issue_date():
    number = new_invoice_number(datetime(2026, 10, 18, 23, 59, tzinfo=timezone.utc))
    assert number.startswith("INV-20261018-")
    assert new_invoice_number() != new_invoice_number()


def test_default_currency_applies(client, as_admin, acme):
    assert post_invoice(client, as_admin, acme.id).json()["currency"] == settings.DEFAULT_CURRENCY


def test_nested_route_creates_invoice(client, as_admin, acme):
    response = client.post(f"{API}/clients/{acme.id}/invoices", json={"amount": "10"}, headers=as_admin)
    assert response.status_code == 201
    assert response.json()["client_id"] == acme.id

    missing = client.post(f"{API}/clients/999/invoices", json={"amount": "10"}, headers=as_admin)
    assert missing.status_code == 404


def test_negative_amount_is_rejected(client, as_accounts, acme):
    assert post_invoice(client, as_accounts, acme.id, amount="-0.01").status_code == 422


def test_invoice_does_not_copy_client_details(db, acme):
    invoice = InvoiceService.create(db, acme.id, InvoiceAmount(amount=Decimal("5")), context=CTX)

    assert not hasattr(invoice, "name")
    assert not hasattr(invoice, "address")
    assert invoice.client.name == "Acme Studio"
    assert acme.invoices[0].id == invoice.id


def test_listing_invoices_of_unknown_client_is_404(client, as_accounts):
    assert client.get(f"{API}/clients/999/invoices", headers=as_accounts).status_code == 404


def test_list_invoices_filters_by_status(client, as_accounts, acme):
    first = post_invoice(client, as_accounts, acme.id).json()
    post_invoice(client, as_accounts, acme.id)
    client.patch(
        f"{API}/invoices/{first['id']}/status",
        json={"status": "CANCELLED", "version": first["version"]},
        headers=as_accounts,
    )

    everything = client.get(f"{API}/invoices", headers=as_accounts).json()
    cancelled = client.get(f"{API}/invoices", params={"status": "CANCELLED"}, headers=as_accounts).json()

    assert everything["total"] == 2
    assert cancelled["total"] == 1
    assert cancelled["items"][0]["id"] == first["id"]


def test_list_invoices_filters_by_client(client, db, as_accounts, acme):
    other = Client(name="Umbrella")
    db.add(other)
    db.commit()
    mine = post_invoice(client, as_accounts, acme.id).json()
    post_invoice(client, as_accounts, other.id)

    page = client.get(f"{API}/invoices", params={"client_id": acme.id}, headers=as_accounts).json()

    assert page["total"] == 1
    assert page["items"][0]["id"] == mine["id"]


def add_invoice_created_at(db, client_id, created_at, number):
    invoice = Invoice(
        client_id=client_id, number=number, amount=Decimal("1"), currency="USD",
        status=InvoiceStatus.PENDING, created_at=created_at,
    )
    db.add(invoice)
    db.commit()
    return invoice.id


def test_created_range_is_inclusive(db, acme):
    early = add_invoice_created_at(db, acme.id, datetime(2026, 1, 1, 9, 0), "INV-A")
    lower = add_invoice_created_at(db, acme.id, datetime(2026, 2, 1, 9, 0), "INV-B")
    upper = add_invoice_created_at(db, acme.id, datetime(2026, 3, 1, 9, 0), "INV-C")
    add_invoice_created_at(db, acme.id, datetime(2026, 4, 1, 9, 0), "INV-D")

    filters = InvoiceFilter(created_from=datetime(2026, 2, 1, 9, 0), created_to=datetime(2026, 3, 1, 9, 0))
    total, items = InvoiceService.list(db, filters, PaginationParams())

    assert total == 2
    assert {i.id for i in items} == {lower, upper}

    total, items = InvoiceService.list(db, InvoiceFilter(created_to=datetime(2026, 1, 1, 9, 0)), PaginationParams())
    assert [i.id for i in items] == [early]

def test_complete_invoice_queues_document(client, db, as_accounts, acme):
    invoice = post_invoice(client, as_accounts, acme.id).json()

    response = client.patch(
        f"{API}/invoices/{invoice['id']}/status",
        json={"status": "COMPLETED", "version": invoice["version"]},
        headers=as_accounts,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "COMPLETED"
    assert body["version"] == invoice["version"] + 1
    assert db.query(InvoiceDocument).filter_by(invoice_id=invoice["id"]).count() == 1


def test_cancel_does_not_queue_document(client, db, as_admin, acme):
    invoice = post_invoice(client, as_admin, acme.id).json()

    client.patch(
        f"{API}/invoices/{invoice['id']}/status",
        json={"status": "CANCELLED", "version": invoice["version"]},
        headers=as_admin,
    )

    assert db.query(InvoiceDocument).count() == 0


def test_stale_version_conflicts(client, as_accounts, acme):
    invoice = post_invoice(client, as_accounts, acme.id).json()
    url = f"{API}/invoices/{invoice['id']}/status"

    first = client.patch(url, json={"status": "COMPLETED", "version": invoice["version"]}, headers=as_accounts)
    second = client.patch(url, json={"status": "CANCELLED", "version": invoice["version"]}, headers=as_accounts)

    assert first.status_code == 200
    assert second.status_code == 409
    assert client.get(f"{API}/invoices/{invoice['id']}", headers=as_accounts).json()["status"] == "COMPLETED"


@pytest.mark.parametrize("target", ["PENDING", "CANCELLED", "COMPLETED"])
def test_completed_is_terminal(client, as_accounts, acme, target):
    invoice = post_invoice(client, as_accounts, acme.id).json()
    url = f"{API}/invoices/{invoice['id']}/status"
    done = client.patch(url, json={"status": "COMPLETED", "version": invoice["version"]}, headers=as_accounts).json()

    response = client.patch(url, json={"status": target, "version": done["version"]}, headers=as_accounts)
    assert response.status_code == 409


def test_concurrent_writer_loses(session_factory, acme):
    """Two sessions read the same version; the second flush hits StaleDataError."""
    setup = session_factory()
    invoice = InvoiceService.create(setup, acme.id, InvoiceAmount(amount=Decimal("1")), context=CTX)
    invoice_id, version = invoice.id, invoice.version
    setup.close()

    first, second = session_factory(), session_factory()
    second.query(Invoice).filter_by(id=invoice_id).one()  # loads the same version

    InvoiceService.change_status(first, invoice_id, InvoiceStatus.COMPLETED, version, context=CTX)

    with pytest.raises(HTTPException) as exc:
        InvoiceService.change_status(second, invoice_id, InvoiceStatus.CANCELLED, version, context=CTX)
    assert exc.value.status_code == 409

    first.close()
    second.close()


def test_status_change_requires_billing_role(client, as_design, as_admin, acme):
    invoice = post_invoice(client, as_admin, acme.id).json()
    response = client.patch(
        f"{API}/invoices/{invoice['id']}/status",
        json={"status": "COMPLETED", "version": invoice["version"]},
        headers=as_design,
    )
    assert response.status_code == 403

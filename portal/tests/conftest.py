"""Async test fixtures for portal tests using SQLite."""

from __future__ import annotations

from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from portal.database import build_engine, build_session_factory, get_db
from portal.models.base import Base
from portal.services import role_svc, session_svc

STORE = "acme.myshopify.com"
CUSTOMER_ID = "gid://shopify/Customer/1001"
CONTACT_ID = "gid://shopify/CompanyContact/2001"
COMPANY_ID = "gid://shopify/Company/3001"


def make_edge(
    assignment_id: str,
    role_name: str,
    location: tuple[str, str] | None = None,
    company: tuple[str, str] = (COMPANY_ID, "Acme Wholesale"),
) -> dict[str, Any]:
    """Build one Shopify roleAssignments edge."""
    node: dict[str, Any] = {
        "id": assignment_id,
        "role": {"id": f"gid://shopify/CompanyContactRole/{role_name}", "name": role_name},
        "company": {"id": company[0], "name": company[1]},
        "companyLocation": None,
    }
    if location:
        node["companyLocation"] = {"id": location[0], "name": location[1]}
    return {"node": node}


def make_customer(edges: list[dict[str, Any]] | None = None, *, with_profile: bool = True) -> dict[str, Any]:
    """Build a Shopify customer payload as returned by the customer details query."""
    profiles = []
    if with_profile:
        profiles.append(
            {
                "id": CONTACT_ID,
                "isMainContact": True,
                "company": {"id": COMPANY_ID, "name": "Acme Wholesale"},
                "roleAssignments": {"edges": edges or []},
            }
        )
    return {
        "id": CUSTOMER_ID,
        "firstName": "Ada",
        "lastName": "Buyer",
        "email": "ada@acme.test",
        "phone": "+15550001111",
        "state": "ENABLED",
        "companyContactProfiles": profiles,
    }


class FakeShopify:
    """Stands in for ``CustomersAPI`` with a canned customer payload."""

    def __init__(self, customer: dict[str, Any] | None):
        self.customer = customer
        self.calls: list[str] = []

    async def get_details(self, customer_id: str):
        self.calls.append(customer_id)
        return self.customer


SHOPIFY_CONTACT_ROLES = [
    {"id": "gid://shopify/CompanyContactRole/901", "name": "Location admin", "note": None},
    {"id": "gid://shopify/CompanyContactRole/902", "name": "Ordering only", "note": None},
]


class FakeCompanies:
    """Stands in for ``CompaniesAPI``, recording every mutation."""

    def __init__(self, contact_roles: list[dict[str, Any]] | None = None):
        self.contact_roles_by_location = contact_roles if contact_roles is not None else SHOPIFY_CONTACT_ROLES
        self.assigned: list[tuple[str, str, str]] = []
        self.revoked: list[tuple[str, str]] = []
        self.deleted: list[str] = []

    async def contact_roles(self, company_location_id: str):
        return self.contact_roles_by_location

    async def assign_location_role(self, company_location_id: str, company_contact_id: str, company_contact_role_id: str):
        self.assigned.append((company_location_id, company_contact_id, company_contact_role_id))
        return [f"gid://shopify/CompanyContactRoleAssignment/new-{len(self.assigned)}"]

    async def revoke_contact_role(self, company_contact_id: str, assignment_id: str):
        self.revoked.append((company_contact_id, assignment_id))
        return assignment_id

    async def delete_contact(self, company_contact_id: str):
        self.deleted.append(company_contact_id)
        return company_contact_id


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def clear_session_cache():
    session_svc.session_cache.clear()
    yield
    session_svc.session_cache.clear()


@pytest_asyncio.fixture
async def engine():
    eng = build_engine("sqlite+aiosqlite:///:memory:")
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def db(engine):
    session_factory = build_session_factory(engine)
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def roles(db: AsyncSession):
    await role_svc.seed_default_roles(db)
    return await role_svc.list_roles(db)


@pytest_asyncio.fixture
async def client(engine):
    """HTTPX async test client against the portal app."""
    from portal.app import app

    session_factory = build_session_factory(engine)

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()

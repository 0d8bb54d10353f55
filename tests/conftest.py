"""Shared fixtures: an in-memory SQLite store and a recording stub gateway."""
from datetime import datetime
from typing import Optional

import pytest

from booking_core import models, schemas
from booking_core.database import build_engine, build_session_factory
from booking_core.errors import NotFoundError
from booking_core.gateway import StoreGateway


@pytest.fixture
def session_factory():
    engine = build_engine("sqlite://")
    models.Base.metadata.create_all(engine)
    yield build_session_factory(engine)
    engine.dispose()


@pytest.fixture
def gateway(session_factory) -> StoreGateway:
    return StoreGateway(session_factory)


@pytest.fixture
def authorize(session_factory):
    """Register a requester token for the organization with the given code."""

    def _authorize(token: str, code: int) -> None:
        with session_factory() as db:
            org = db.query(models.Organization).filter(models.Organization.code == code).one()
            db.add(models.AuthorizedPrincipal(phone_number=token, organization_id=org.id))
            db.commit()

    return _authorize


NOW = datetime(2024, 5, 1, 12, 0, 0)


def make_offering(id: int = 1, organization_code: int = 1, **overrides) -> schemas.OfferingResponse:
    values = dict(
        id=id,
        name="Haircut",
        description=None,
        price=25.0,
        duration=30,
        category="hair",
        organization_id=organization_code + 100,
        organization_code=organization_code,
        created_at=NOW,
        updated_at=NOW,
    )
    values.update(overrides)
    return schemas.OfferingResponse(**values)


def make_staff(id: int = 1, organization_code: int = 1, **overrides) -> schemas.StaffResponse:
    values = dict(
        id=id,
        name="Ana",
        email="ana@example.com",
        phone="+15550001111",
        organization_id=organization_code + 100,
        organization_code=organization_code,
        created_at=NOW,
        updated_at=NOW,
    )
    values.update(overrides)
    return schemas.StaffResponse(**values)


def make_organization(id: int = 1, **overrides) -> schemas.OrganizationResponse:
    values = dict(id=id, code=id, name="Acme Salon", created_at=NOW, updated_at=NOW)
    values.update(overrides)
    return schemas.OrganizationResponse(**values)


class StubGateway:
    """In-memory gateway that records every call it receives."""

    def __init__(
        self,
        authorized_tokens: Optional[dict[int, set[str]]] = None,
        organizations: Optional[list] = None,
        staff: Optional[list] = None,
        offerings: Optional[list] = None,
        known_codes: tuple = (1, 7),
    ):
        self.known_codes = set(known_codes)
        self.authorized_tokens = authorized_tokens or {}
        self.organizations = {o.id: o for o in organizations or []}
        self.staff = {s.id: s for s in staff or []}
        self.offerings = {o.id: o for o in offerings or []}
        self.calls: list[tuple] = []

    def called(self, name: str) -> list[tuple]:
        return [call for call in self.calls if call[0] == name]

    async def resolve_organization_id(self, code):
        self.calls.append(("resolve_organization_id", code))
        return self._resolve(code)

    def _resolve(self, code):
        if code not in self.known_codes:
            raise NotFoundError(f"Organization with code {code} not found", entity="organization", identifier=code)
        return code + 100

    async def check_authorization(self, requester_token, organization_code):
        self.calls.append(("check_authorization", requester_token, organization_code))
        return requester_token in self.authorized_tokens.get(organization_code, set())

    # Organizations

    async def list_organizations(self, filters):
        self.calls.append(("list_organizations", filters))
        return list(self.organizations.values())

    async def get_organization(self, organization_id):
        self.calls.append(("get_organization", organization_id))
        return self.organizations.get(organization_id)

    async def create_organization(self, organization):
        self.calls.append(("create_organization", organization))
        new_id = max(self.organizations, default=0) + 1
        record = make_organization(new_id, **organization.model_dump(exclude={"code"}), code=organization.code or new_id)
        self.organizations[new_id] = record
        return record

    async def update_organization(self, organization_id, changes):
        self.calls.append(("update_organization", organization_id, changes))
        record = self.organizations[organization_id].model_copy(update=changes)
        self.organizations[organization_id] = record
        return record

    async def delete_organization(self, organization_id):
        self.calls.append(("delete_organization", organization_id))
        return self.organizations.pop(organization_id, None) is not None

    # Staff

    async def list_staff(self, filters):
        self.calls.append(("list_staff", filters))
        return [s for s in self.staff.values() if s.organization_code == filters.organization_code]

    async def get_staff(self, staff_id):
        self.calls.append(("get_staff", staff_id))
        return self.staff.get(staff_id)

    async def create_staff(self, values):
        self.calls.append(("create_staff", values))
        self._resolve(values["organization_code"])
        record = make_staff(max(self.staff, default=0) + 1, **values)
        self.staff[record.id] = record
        return record

    async def update_staff(self, staff_id, changes):
        self.calls.append(("update_staff", staff_id, changes))
        record = self.staff[staff_id].model_copy(update=changes)
        self.staff[staff_id] = record
        return record

    async def delete_staff(self, staff_id):
        self.calls.append(("delete_staff", staff_id))
        return self.staff.pop(staff_id, None) is not None

    # Offerings

    async def list_offerings(self, filters):
        self.calls.append(("list_offerings", filters))
        return [o for o in self.offerings.values() if o.organization_code == filters.organization_code]

    async def get_offering(self, offering_id):
        self.calls.append(("get_offering", offering_id))
        return self.offerings.get(offering_id)

    async def create_offering(self, values):
        self.calls.append(("create_offering", values))
        self._resolve(values["organization_code"])
        record = make_offering(max(self.offerings, default=0) + 1, **values)
        self.offerings[record.id] = record
        return record

    async def update_offering(self, offering_id, changes):
        self.calls.append(("update_offering", offering_id, changes))
        record = self.offerings[offering_id].model_copy(update=changes)
        self.offerings[offering_id] = record
        return record

    async def delete_offering(self, offering_id):
        self.calls.append(("delete_offering", offering_id))
        return self.offerings.pop(offering_id, None) is not None

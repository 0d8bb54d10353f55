"""Store gateway: the single mediator between tool handlers and the backing store.

``StoreGateway`` wraps the session-level functions in ``crud`` with:
- one session per call, opened and closed by the gateway
- execution on a worker thread, so every store round trip is awaitable
- conversion of ORM rows into response schemas while the session is open
- translation of every SQLAlchemy failure into ``StoreError``

"No matching row" is never an error here: single-row lookups return None and
the handlers decide what that means.
"""
import asyncio
import logging
from typing import Callable, Optional, TypeVar

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from . import crud, schemas
from .errors import NotFoundError, StoreError

logger = logging.getLogger("booking-core.gateway")

T = TypeVar("T")


class StoreGateway:
    """Async CRUD facade over a SQLAlchemy session factory."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def _execute(self, action: str, operation: Callable[[Session], T]) -> T:
        db = self._session_factory()
        try:
            return operation(db)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Store failure while trying to {action}: {e}")
            raise StoreError(f"Failed to {action}: {e}") from e
        finally:
            db.close()

    async def _run(self, action: str, operation: Callable[[Session], T]) -> T:
        return await asyncio.to_thread(self._execute, action, operation)

    @staticmethod
    def _resolve_code(db: Session, code: int) -> int:
        org = crud.get_organization_by_code(db, code)
        if org is None:
            raise NotFoundError(
                f"Organization with code {code} not found",
                entity="organization",
                identifier=code,
            )
        return org.id

    # ------------------------------------------------------------------
    # Connectivity and identifier resolution
    # ------------------------------------------------------------------

    async def ping(self) -> bool:
        """Probe the store. Returns False instead of raising on failure."""
        try:
            await self._run("reach the store", lambda db: db.execute(text("SELECT 1")).scalar())
        except StoreError:
            return False
        return True

    async def resolve_organization_id(self, code: int) -> int:
        """Map an external organization code to its internal ID.

        The create and update operations resolve codes themselves, inside the
        same session as the write. This is for callers that need the ID alone.

        Raises:
            NotFoundError: if no organization has that code
        """
        return await self._run("resolve organization", lambda db: self._resolve_code(db, code))

    async def check_authorization(self, requester_token: str, organization_code: int) -> bool:
        """Whether ``requester_token`` may mutate offerings of the organization.

        An unknown organization code is never authorized.
        """
        def check(db: Session) -> bool:
            org = crud.get_organization_by_code(db, organization_code)
            if org is None:
                logger.info(f"Authorization check against unknown organization code {organization_code}")
                return False
            return crud.is_principal_authorized(db, requester_token, org.id)

        return await self._run("check authorization", check)

    # ------------------------------------------------------------------
    # Organizations
    # ------------------------------------------------------------------

    async def list_organizations(self, filters: schemas.OrganizationFilter) -> list[schemas.OrganizationResponse]:
        return await self._run(
            "list organizations",
            lambda db: [schemas.OrganizationResponse.model_validate(o) for o in crud.get_organizations(db, filters)],
        )

    async def get_organization(self, organization_id: int) -> Optional[schemas.OrganizationResponse]:
        def get(db: Session):
            org = crud.get_organization(db, organization_id)
            return schemas.OrganizationResponse.model_validate(org) if org else None

        return await self._run("get organization", get)

    async def create_organization(self, organization: schemas.OrganizationCreate) -> schemas.OrganizationResponse:
        return await self._run(
            "create organization",
            lambda db: schemas.OrganizationResponse.model_validate(crud.create_organization(db, organization)),
        )

    async def update_organization(self, organization_id: int, changes: dict) -> schemas.OrganizationResponse:
        def update(db: Session):
            org = crud.update_organization(db, organization_id, changes)
            if org is None:
                raise NotFoundError(
                    f"Organization with ID {organization_id} not found",
                    entity="organization",
                    identifier=organization_id,
                )
            return schemas.OrganizationResponse.model_validate(org)

        return await self._run("update organization", update)

    async def delete_organization(self, organization_id: int) -> bool:
        return await self._run("delete organization", lambda db: crud.delete_organization(db, organization_id))

    # ------------------------------------------------------------------
    # Staff
    # ------------------------------------------------------------------

    async def list_staff(self, filters: schemas.StaffFilter) -> list[schemas.StaffResponse]:
        return await self._run(
            "list staff",
            lambda db: [schemas.StaffResponse.model_validate(s) for s in crud.get_staff_members(db, filters)],
        )

    async def get_staff(self, staff_id: int) -> Optional[schemas.StaffResponse]:
        def get(db: Session):
            staff = crud.get_staff_member(db, staff_id)
            return schemas.StaffResponse.model_validate(staff) if staff else None

        return await self._run("get staff member", get)

    async def create_staff(self, values: dict) -> schemas.StaffResponse:
        """Create a staff member. ``values['organization_code']`` is resolved first.

        Raises:
            NotFoundError: if the organization code matches no organization
        """
        def create(db: Session):
            fields = dict(values)
            organization_id = self._resolve_code(db, fields.pop("organization_code"))
            return schemas.StaffResponse.model_validate(crud.create_staff_member(db, fields, organization_id))

        return await self._run("create staff member", create)

    async def update_staff(self, staff_id: int, changes: dict) -> schemas.StaffResponse:
        def update(db: Session):
            fields = dict(changes)
            code = fields.pop("organization_code", None)
            if code is not None:
                fields["organization_id"] = self._resolve_code(db, code)
            staff = crud.update_staff_member(db, staff_id, fields)
            if staff is None:
                raise NotFoundError(f"Staff member with ID {staff_id} not found", entity="staff", identifier=staff_id)
            return schemas.StaffResponse.model_validate(staff)

        return await self._run("update staff member", update)

    async def delete_staff(self, staff_id: int) -> bool:
        return await self._run("delete staff member", lambda db: crud.delete_staff_member(db, staff_id))

    # ------------------------------------------------------------------
    # Offerings
    # ------------------------------------------------------------------

    async def list_offerings(self, filters: schemas.OfferingFilter) -> list[schemas.OfferingResponse]:
        return await self._run(
            "list offerings",
            lambda db: [schemas.OfferingResponse.model_validate(o) for o in crud.get_offerings(db, filters)],
        )

    async def get_offering(self, offering_id: int) -> Optional[schemas.OfferingResponse]:
        def get(db: Session):
            offering = crud.get_offering(db, offering_id)
            return schemas.OfferingResponse.model_validate(offering) if offering else None

        return await self._run("get offering", get)

    async def create_offering(self, values: dict) -> schemas.OfferingResponse:
        """Create an offering. ``values['organization_code']`` is resolved first.

        Raises:
            NotFoundError: if the organization code matches no organization
        """
        def create(db: Session):
            fields = dict(values)
            organization_id = self._resolve_code(db, fields.pop("organization_code"))
            return schemas.OfferingResponse.model_validate(crud.create_offering(db, fields, organization_id))

        return await self._run("create offering", create)

    async def update_offering(self, offering_id: int, changes: dict) -> schemas.OfferingResponse:
        def update(db: Session):
            fields = dict(changes)
            code = fields.pop("organization_code", None)
            if code is not None:
                fields["organization_id"] = self._resolve_code(db, code)
            offering = crud.update_offering(db, offering_id, fields)
            if offering is None:
                raise NotFoundError(f"Offering with ID {offering_id} not found", entity="offering", identifier=offering_id)
            return schemas.OfferingResponse.model_validate(offering)

        return await self._run("update offering", update)

    async def delete_offering(self, offering_id: int) -> bool:
        return await self._run("delete offering", lambda db: crud.delete_offering(db, offering_id))

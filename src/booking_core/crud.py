"""CRUD operations for organizations, staff and offerings.

Every function takes an open SQLAlchemy session as its first argument and
commits its own writes. Transaction scope and error translation belong to
``gateway.StoreGateway``.
"""
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from . import models, schemas

logger = logging.getLogger("booking-core.crud")


def _apply_changes(row, changes: dict) -> None:
    """Copy non-None values onto ``row`` and stamp ``updated_at``."""
    for field, value in changes.items():
        if value is not None:
            setattr(row, field, value)
    row.updated_at = datetime.utcnow()


# ============================================================================
# Organization CRUD Operations
# ============================================================================

def get_organizations(
    db: Session,
    filters: schemas.OrganizationFilter,
) -> list[models.Organization]:
    """
    List organizations, newest first.

    Args:
        db: Database session
        filters: Optional name (partial, case-insensitive) and email (exact)

    Returns:
        List of organizations
    """
    query = select(models.Organization)

    if filters.name:
        query = query.where(models.Organization.name.ilike(f"%{filters.name}%"))
    if filters.email:
        query = query.where(models.Organization.email == filters.email)

    query = query.order_by(models.Organization.created_at.desc(), models.Organization.id.desc())
    return list(db.scalars(query))


def get_organization(db: Session, organization_id: int) -> Optional[models.Organization]:
    """
    Get an organization by internal ID.

    Returns:
        Organization instance or None if not found
    """
    return db.get(models.Organization, organization_id)


def get_organization_by_code(db: Session, code: int) -> Optional[models.Organization]:
    """
    Get an organization by its external code.

    Returns:
        Organization instance or None if not found
    """
    return db.scalars(
        select(models.Organization).where(models.Organization.code == code)
    ).first()


def create_organization(db: Session, organization: schemas.OrganizationCreate) -> models.Organization:
    """
    Create a new organization.

    When no external code is supplied the new row's internal ID doubles as its code.

    Args:
        db: Database session
        organization: Validated organization data

    Returns:
        Created organization instance
    """
    db_org = models.Organization(**organization.model_dump())
    db.add(db_org)
    db.flush()
    if db_org.code is None:
        db_org.code = db_org.id
    db.commit()
    db.refresh(db_org)
    logger.debug(f"Created organization {db_org.id} (code {db_org.code})")
    return db_org


def update_organization(db: Session, organization_id: int, changes: dict) -> Optional[models.Organization]:
    """
    Update an organization.

    Args:
        db: Database session
        organization_id: Internal organization ID
        changes: Field values to set (None values are ignored)

    Returns:
        Updated organization or None if not found
    """
    db_org = get_organization(db, organization_id)
    if not db_org:
        return None

    _apply_changes(db_org, changes)
    db.commit()
    db.refresh(db_org)
    logger.debug(f"Updated organization {organization_id}")
    return db_org


def delete_organization(db: Session, organization_id: int) -> bool:
    """
    Delete an organization.

    Returns:
        True if deleted, False if not found
    """
    db_org = get_organization(db, organization_id)
    if not db_org:
        return False

    db.delete(db_org)
    db.commit()
    logger.debug(f"Deleted organization {organization_id}")
    return True


# ============================================================================
# Staff CRUD Operations
# ============================================================================

def get_staff_members(db: Session, filters: schemas.StaffFilter) -> list[models.Staff]:
    """
    List staff of the organization with the given external code, newest first.

    Args:
        db: Database session
        filters: Organization code plus optional name (partial) and email (exact)

    Returns:
        List of staff members (empty when the code matches no organization)
    """
    query = (
        select(models.Staff)
        .join(models.Staff.organization)
        .options(joinedload(models.Staff.organization))
        .where(models.Organization.code == filters.organization_code)
    )

    if filters.name:
        query = query.where(models.Staff.name.ilike(f"%{filters.name}%"))
    if filters.email:
        query = query.where(models.Staff.email == filters.email)

    query = query.order_by(models.Staff.created_at.desc(), models.Staff.id.desc())
    return list(db.scalars(query))


def get_staff_member(db: Session, staff_id: int) -> Optional[models.Staff]:
    """Get a staff member by ID, or None if not found."""
    return db.get(models.Staff, staff_id, options=[joinedload(models.Staff.organization)])


def create_staff_member(db: Session, values: dict, organization_id: int) -> models.Staff:
    """
    Create a staff member under an already-resolved organization.

    Args:
        db: Database session
        values: Persistable staff fields (name, email, phone)
        organization_id: Internal organization ID

    Returns:
        Created staff member
    """
    db_staff = models.Staff(**values, organization_id=organization_id)
    db.add(db_staff)
    db.commit()
    db.refresh(db_staff)
    logger.debug(f"Created staff member {db_staff.id} in organization {organization_id}")
    return db_staff


def update_staff_member(db: Session, staff_id: int, changes: dict) -> Optional[models.Staff]:
    """
    Update a staff member.

    Returns:
        Updated staff member or None if not found
    """
    db_staff = get_staff_member(db, staff_id)
    if not db_staff:
        return None

    _apply_changes(db_staff, changes)
    db.commit()
    # organization may have moved; reload everything on next access
    db.expire(db_staff)
    logger.debug(f"Updated staff member {staff_id}")
    return db_staff


def delete_staff_member(db: Session, staff_id: int) -> bool:
    """
    Delete a staff member.

    Returns:
        True if deleted, False if not found
    """
    db_staff = db.get(models.Staff, staff_id)
    if not db_staff:
        return False

    db.delete(db_staff)
    db.commit()
    logger.debug(f"Deleted staff member {staff_id}")
    return True


# ============================================================================
# Offering CRUD Operations
# ============================================================================

def get_offerings(db: Session, filters: schemas.OfferingFilter) -> list[models.Offering]:
    """
    List offerings of the organization with the given external code, newest first.

    Args:
        db: Database session
        filters: Organization code plus optional category (exact) and
            inclusive price bounds

    Returns:
        List of offerings (empty when the code matches no organization)
    """
    query = (
        select(models.Offering)
        .join(models.Offering.organization)
        .options(joinedload(models.Offering.organization))
        .where(models.Organization.code == filters.organization_code)
    )

    if filters.category:
        query = query.where(models.Offering.category == filters.category)
    if filters.price_min is not None:
        query = query.where(models.Offering.price >= filters.price_min)
    if filters.price_max is not None:
        query = query.where(models.Offering.price <= filters.price_max)

    query = query.order_by(models.Offering.created_at.desc(), models.Offering.id.desc())
    return list(db.scalars(query))


def get_offering(db: Session, offering_id: int) -> Optional[models.Offering]:
    """Get an offering by ID, or None if not found."""
    return db.get(models.Offering, offering_id, options=[joinedload(models.Offering.organization)])


def create_offering(db: Session, values: dict, organization_id: int) -> models.Offering:
    """
    Create an offering under an already-resolved organization.

    Args:
        db: Database session
        values: Persistable offering fields (requester token already removed)
        organization_id: Internal organization ID

    Returns:
        Created offering
    """
    db_offering = models.Offering(**values, organization_id=organization_id)
    db.add(db_offering)
    db.commit()
    db.refresh(db_offering)
    logger.debug(f"Created offering {db_offering.id} in organization {organization_id}")
    return db_offering


def update_offering(db: Session, offering_id: int, changes: dict) -> Optional[models.Offering]:
    """
    Update an offering.

    Returns:
        Updated offering or None if not found
    """
    db_offering = get_offering(db, offering_id)
    if not db_offering:
        return None

    _apply_changes(db_offering, changes)
    db.commit()
    db.expire(db_offering)
    logger.debug(f"Updated offering {offering_id}")
    return db_offering


def delete_offering(db: Session, offering_id: int) -> bool:
    """
    Delete an offering.

    Returns:
        True if deleted, False if not found
    """
    db_offering = db.get(models.Offering, offering_id)
    if not db_offering:
        return False

    db.delete(db_offering)
    db.commit()
    logger.debug(f"Deleted offering {offering_id}")
    return True


# ============================================================================
# Authorization
# ============================================================================

def is_principal_authorized(db: Session, requester_token: str, organization_id: int) -> bool:
    """
    Check whether a requester token is registered for an organization.

    Args:
        db: Database session
        requester_token: Caller credential (phone number)
        organization_id: Internal organization ID

    Returns:
        True if a matching authorized_users row exists
    """
    row = db.scalars(
        select(models.AuthorizedPrincipal.id).where(
            models.AuthorizedPrincipal.phone_number == requester_token,
            models.AuthorizedPrincipal.organization_id == organization_id,
        )
    ).first()
    return row is not None

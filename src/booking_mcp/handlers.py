"""MCP tool handlers shared between the stdio and HTTP transports.

All handlers follow a consistent pattern:
- Accept: the raw arguments dict and a ``StoreGateway``
- Validate arguments before any store call
- Return: a ``CallToolResult`` envelope built by ``formatters``
- Log all operations for debugging

Any ``BookingError`` raised along the way stops the handler and becomes a
failure envelope. Offering mutations additionally require the requester token
to be authorized for the organization they touch; organization and staff
mutations and all listings do not.
"""
import functools
import logging
from typing import Awaitable, Callable, Optional

from mcp.types import CallToolResult
from pydantic import BaseModel
from pydantic import ValidationError as SchemaValidationError

from booking_core import schemas
from booking_core.errors import (
    AuthorizationError,
    BookingError,
    NotFoundError,
    ValidationError,
)
from booking_core.gateway import StoreGateway

from . import formatters
from .defaults import ContactDefaults, synthesize_contact

logger = logging.getLogger("booking-mcp.handlers")

Handler = Callable[[dict, StoreGateway], Awaitable[CallToolResult]]


def enveloped(func):
    """Convert ``BookingError`` raised by a handler into a failure envelope."""

    @functools.wraps(func)
    async def wrapper(arguments: Optional[dict], gateway: StoreGateway, *args, **kwargs) -> CallToolResult:
        try:
            return await func(arguments or {}, gateway, *args, **kwargs)
        except BookingError as e:
            logger.warning(f"{func.__name__} failed ({e.kind}): {e}")
            return formatters.failure(str(e))

    return wrapper


def validate(schema: type[BaseModel], arguments: dict):
    """Validate ``arguments`` against ``schema``, reporting every violation."""
    try:
        return schema.model_validate(arguments)
    except SchemaValidationError as e:
        violations = formatters.format_validation_errors(e.errors())
        raise ValidationError(f"Invalid arguments: {'; '.join(violations)}", violations) from e


async def require_authorization(gateway: StoreGateway, requester_token: str, organization_code: Optional[int]) -> None:
    """Raise ``AuthorizationError`` unless the token may act for the organization."""
    if organization_code is None or not await gateway.check_authorization(requester_token, organization_code):
        raise AuthorizationError(
            f"Requester is not authorized to manage offerings of organization {organization_code}",
            organization_code=organization_code,
        )


def not_found(entity: str, identifier: int) -> NotFoundError:
    return NotFoundError(f"{entity} with ID {identifier} not found", entity=entity.lower(), identifier=identifier)


# ============================================================================
# Organization Handlers
# ============================================================================

@enveloped
async def handle_list_organizations(arguments: dict, gateway: StoreGateway) -> CallToolResult:
    """List organizations, optionally filtered by partial name or exact email."""
    filters = validate(schemas.OrganizationFilter, arguments)
    organizations = await gateway.list_organizations(filters)
    logger.info(f"Successfully listed {len(organizations)} organizations")

    return formatters.success(
        organizations,
        formatters.format_count(len(organizations), "organization"),
        count=len(organizations),
    )


@enveloped
async def handle_create_organization(arguments: dict, gateway: StoreGateway) -> CallToolResult:
    """Create a new organization."""
    organization = validate(schemas.OrganizationCreate, arguments)
    result = await gateway.create_organization(organization)
    logger.info(f"Successfully created organization: {result.name} (ID: {result.id}, code: {result.code})")

    return formatters.success(result, formatters.format_created("Organization", result))


@enveloped
async def handle_update_organization(arguments: dict, gateway: StoreGateway) -> CallToolResult:
    """Update an existing organization."""
    update = validate(schemas.OrganizationUpdate, arguments)
    if await gateway.get_organization(update.id) is None:
        raise not_found("Organization", update.id)

    result = await gateway.update_organization(update.id, update.model_dump(exclude={"id"}, exclude_none=True))
    logger.info(f"Successfully updated organization {update.id}: {result.name}")

    return formatters.success(result, formatters.format_updated("Organization", result))


@enveloped
async def handle_delete_organization(arguments: dict, gateway: StoreGateway) -> CallToolResult:
    """Delete an organization by ID."""
    target = validate(schemas.OrganizationDelete, arguments)
    existing = await gateway.get_organization(target.id)
    if existing is None:
        raise not_found("Organization", target.id)

    if not await gateway.delete_organization(target.id):
        raise not_found("Organization", target.id)
    logger.info(f"Successfully deleted organization {target.id}: {existing.name}")

    return formatters.success(
        {"id": target.id, "name": existing.name},
        formatters.format_deleted("Organization", existing.name),
    )


# ============================================================================
# Staff Handlers
# ============================================================================

@enveloped
async def handle_list_staff(arguments: dict, gateway: StoreGateway) -> CallToolResult:
    """List staff of one organization, optionally filtered by name or email."""
    filters = validate(schemas.StaffFilter, arguments)
    staff = await gateway.list_staff(filters)
    logger.info(f"Successfully listed {len(staff)} staff members for organization {filters.organization_code}")

    return formatters.success(staff, formatters.format_count(len(staff), "staff member"), count=len(staff))


@enveloped
async def handle_create_staff(
    arguments: dict,
    gateway: StoreGateway,
    contact_defaults: ContactDefaults = synthesize_contact,
) -> CallToolResult:
    """Create a staff member under the organization with the given code.

    Missing contact details are filled by ``contact_defaults`` before validation.
    """
    staff = validate(schemas.StaffCreate, contact_defaults(arguments))
    result = await gateway.create_staff(staff.model_dump())
    logger.info(f"Successfully created staff member: {result.name} (ID: {result.id})")

    return formatters.success(result, formatters.format_created("Staff member", result))


@enveloped
async def handle_update_staff(arguments: dict, gateway: StoreGateway) -> CallToolResult:
    """Update an existing staff member."""
    update = validate(schemas.StaffUpdate, arguments)
    if await gateway.get_staff(update.id) is None:
        raise not_found("Staff member", update.id)

    result = await gateway.update_staff(update.id, update.model_dump(exclude={"id"}, exclude_none=True))
    logger.info(f"Successfully updated staff member {update.id}: {result.name}")

    return formatters.success(result, formatters.format_updated("Staff member", result))


@enveloped
async def handle_delete_staff(arguments: dict, gateway: StoreGateway) -> CallToolResult:
    """Delete a staff member by ID."""
    target = validate(schemas.StaffDelete, arguments)
    existing = await gateway.get_staff(target.id)
    if existing is None:
        raise not_found("Staff member", target.id)

    if not await gateway.delete_staff(target.id):
        raise not_found("Staff member", target.id)
    logger.info(f"Successfully deleted staff member {target.id}: {existing.name}")

    return formatters.success(
        {"id": target.id, "name": existing.name},
        formatters.format_deleted("Staff member", existing.name),
    )


# ============================================================================
# Offering Handlers
# ============================================================================

@enveloped
async def handle_list_offerings(arguments: dict, gateway: StoreGateway) -> CallToolResult:
    """List offerings of one organization with optional category and price range."""
    filters = validate(schemas.OfferingFilter, arguments)
    offerings = await gateway.list_offerings(filters)
    logger.info(f"Successfully listed {len(offerings)} offerings for organization {filters.organization_code}")

    return formatters.success(offerings, formatters.format_count(len(offerings), "offering"), count=len(offerings))


@enveloped
async def handle_create_offering(arguments: dict, gateway: StoreGateway) -> CallToolResult:
    """Create an offering. The requester must be authorized for the organization."""
    offering = validate(schemas.OfferingCreate, arguments)
    await require_authorization(gateway, offering.requester_token, offering.organization_code)

    result = await gateway.create_offering(offering.model_dump(exclude={"requester_token"}))
    logger.info(f"Successfully created offering: {result.name} (ID: {result.id})")

    return formatters.success(result, formatters.format_created("Offering", result))


@enveloped
async def handle_update_offering(arguments: dict, gateway: StoreGateway) -> CallToolResult:
    """Update an offering.

    Authorization is checked against the organization named in the arguments,
    or the offering's current organization when none is given.
    """
    update = validate(schemas.OfferingUpdate, arguments)
    existing = await gateway.get_offering(update.id)
    if existing is None:
        raise not_found("Offering", update.id)

    scope = update.organization_code if update.organization_code is not None else existing.organization_code
    await require_authorization(gateway, update.requester_token, scope)

    result = await gateway.update_offering(
        update.id,
        update.model_dump(exclude={"id", "requester_token"}, exclude_none=True),
    )
    logger.info(f"Successfully updated offering {update.id}: {result.name}")

    return formatters.success(result, formatters.format_updated("Offering", result))


@enveloped
async def handle_delete_offering(arguments: dict, gateway: StoreGateway) -> CallToolResult:
    """Delete an offering. The requester must be authorized for its organization."""
    target = validate(schemas.OfferingDelete, arguments)
    existing = await gateway.get_offering(target.id)
    if existing is None:
        raise not_found("Offering", target.id)

    await require_authorization(gateway, target.requester_token, existing.organization_code)

    if not await gateway.delete_offering(target.id):
        raise not_found("Offering", target.id)
    logger.info(f"Successfully deleted offering {target.id}: {existing.name}")

    return formatters.success(
        {"id": target.id, "name": existing.name},
        formatters.format_deleted("Offering", existing.name),
    )


# ============================================================================
# Handler registry
# ============================================================================

def get_handler_map(contact_defaults: ContactDefaults = synthesize_contact) -> dict[str, Handler]:
    """Map tool names to handlers, binding the staff contact default policy."""
    return {
        # Organization handlers
        "list_organizations": handle_list_organizations,
        "create_organization": handle_create_organization,
        "update_organization": handle_update_organization,
        "delete_organization": handle_delete_organization,
        # Staff handlers
        "list_staff": handle_list_staff,
        "create_staff": functools.partial(handle_create_staff, contact_defaults=contact_defaults),
        "update_staff": handle_update_staff,
        "delete_staff": handle_delete_staff,
        # Offering handlers
        "list_offerings": handle_list_offerings,
        "create_offering": handle_create_offering,
        "update_offering": handle_update_offering,
        "delete_offering": handle_delete_offering,
    }


async def dispatch(
    name: str,
    arguments: Optional[dict],
    gateway: StoreGateway,
    handler_map: dict[str, Handler],
) -> CallToolResult:
    """Run the handler registered under ``name``.

    Unexpected exceptions are logged with traceback and returned as failure
    envelopes so no raw fault reaches the client.
    """
    handler = handler_map.get(name)
    if handler is None:
        logger.warning(f"Unknown tool requested: {name}")
        return formatters.failure(f"Unknown tool: {name}")

    try:
        return await handler(arguments or {}, gateway)
    except Exception as e:
        logger.error(f"Unexpected error during {name} call: {type(e).__name__}: {e}", exc_info=True)
        logger.error(f"  Arguments: {arguments}")
        return formatters.failure(f"{type(e).__name__}: {e}")

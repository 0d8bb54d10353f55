"""Shared MCP tool definitions.

This module provides the definitive list of MCP tools used by both stdio and
HTTP transports, so both endpoints expose identical functionality.
"""

from mcp.types import Tool

ID_PROPERTY = {"type": "integer", "minimum": 1}

ORGANIZATION_CODE_DESCRIPTION = "External code of the organization (not its internal ID)"
REQUESTER_TOKEN = {
    "type": "string",
    "description": "Requester credential (phone number) authorized for the organization",
}


def _object(properties: dict, required: list[str] = None) -> dict:
    schema = {"type": "object", "properties": properties, "additionalProperties": False}
    if required:
        schema["required"] = required
    return schema


def get_tools() -> list[Tool]:
    """Get the list of all MCP tools for organization, staff and offering management."""
    return [
        # ============================================================================
        # Organization Tools
        # ============================================================================
        Tool(
            name="list_organizations",
            description="List all organizations, newest first, with optional filtering by name or email.",
            inputSchema=_object({
                "name": {"type": "string", "description": "Filter by name (partial match, case insensitive)"},
                "email": {"type": "string", "description": "Filter by email (exact match)"},
            }),
        ),
        Tool(
            name="create_organization",
            description="Create a new organization. "
                        "Staff and offerings are attached to it by its external code.",
            inputSchema=_object({
                "name": {"type": "string", "maxLength": 255, "description": "Organization name (required, max 255 characters)"},
                "code": {**ID_PROPERTY, "description": "External organization code (optional, defaults to the new ID)"},
                "description": {"type": "string", "description": "Organization description (optional)"},
                "email": {"type": "string", "format": "email", "description": "Contact email (optional)"},
                "phone": {"type": "string", "maxLength": 20, "description": "Contact phone (optional, max 20 characters)"},
                "address": {"type": "string", "description": "Postal address (optional)"},
            }, required=["name"]),
        ),
        Tool(
            name="update_organization",
            description="Update an existing organization. Only the fields provided are changed.",
            inputSchema=_object({
                "id": {**ID_PROPERTY, "description": "Organization ID to update (required)"},
                "name": {"type": "string", "maxLength": 255, "description": "Organization name (optional)"},
                "description": {"type": "string", "description": "Organization description (optional)"},
                "email": {"type": "string", "format": "email", "description": "Contact email (optional)"},
                "phone": {"type": "string", "maxLength": 20, "description": "Contact phone (optional)"},
                "address": {"type": "string", "description": "Postal address (optional)"},
            }, required=["id"]),
        ),
        Tool(
            name="delete_organization",
            description="Delete an organization by ID.",
            inputSchema=_object({
                "id": {**ID_PROPERTY, "description": "Organization ID to delete (required)"},
            }, required=["id"]),
        ),
        # ============================================================================
        # Staff Tools
        # ============================================================================
        Tool(
            name="list_staff",
            description="List staff members of an organization with optional filtering by name or email.",
            inputSchema=_object({
                "organization_code": {**ID_PROPERTY, "description": f"{ORGANIZATION_CODE_DESCRIPTION} (required)"},
                "name": {"type": "string", "description": "Filter by name (partial match, case insensitive)"},
                "email": {"type": "string", "description": "Filter by email (exact match)"},
            }, required=["organization_code"]),
        ),
        Tool(
            name="create_staff",
            description="Create a new staff member. Only name and organization are required; "
                        "email and phone are generated when not provided.",
            inputSchema=_object({
                "name": {"type": "string", "maxLength": 255, "description": "Staff member name (required)"},
                "email": {"type": "string", "format": "email", "description": "Email (optional, generated if absent)"},
                "phone": {"type": "string", "maxLength": 20, "description": "Phone (optional, generated if absent)"},
                "organization_code": {**ID_PROPERTY, "description": f"{ORGANIZATION_CODE_DESCRIPTION} (required)"},
            }, required=["name", "organization_code"]),
        ),
        Tool(
            name="update_staff",
            description="Update an existing staff member.",
            inputSchema=_object({
                "id": {**ID_PROPERTY, "description": "Staff member ID to update (required)"},
                "name": {"type": "string", "maxLength": 255, "description": "Name (optional)"},
                "email": {"type": "string", "format": "email", "description": "Email (optional)"},
                "phone": {"type": "string", "maxLength": 20, "description": "Phone (optional)"},
                "organization_code": {**ID_PROPERTY, "description": f"{ORGANIZATION_CODE_DESCRIPTION} (optional, moves the staff member)"},
            }, required=["id"]),
        ),
        Tool(
            name="delete_staff",
            description="Delete a staff member by ID.",
            inputSchema=_object({
                "id": {**ID_PROPERTY, "description": "Staff member ID to delete (required)"},
            }, required=["id"]),
        ),
        # ============================================================================
        # Offering Tools
        # ============================================================================
        Tool(
            name="list_offerings",
            description="List offerings of an organization with optional filtering by category and price range.",
            inputSchema=_object({
                "organization_code": {**ID_PROPERTY, "description": f"{ORGANIZATION_CODE_DESCRIPTION} (required)"},
                "category": {"type": "string", "description": "Filter by category (exact match)"},
                "price_min": {"type": "number", "exclusiveMinimum": 0, "description": "Minimum price (inclusive)"},
                "price_max": {"type": "number", "exclusiveMinimum": 0, "description": "Maximum price (inclusive)"},
            }, required=["organization_code"]),
        ),
        Tool(
            name="create_offering",
            description="Create a new offering. The requester token must be authorized for the organization.",
            inputSchema=_object({
                "name": {"type": "string", "maxLength": 255, "description": "Offering name (required)"},
                "description": {"type": "string", "description": "Offering description (optional)"},
                "price": {"type": "number", "exclusiveMinimum": 0, "description": "Price (required, positive)"},
                "duration": {**ID_PROPERTY, "description": "Duration in minutes (required, positive integer)"},
                "category": {"type": "string", "maxLength": 100, "description": "Category (optional, max 100 characters)"},
                "organization_code": {**ID_PROPERTY, "description": f"{ORGANIZATION_CODE_DESCRIPTION} (required)"},
                "requester_token": REQUESTER_TOKEN,
            }, required=["name", "price", "duration", "organization_code", "requester_token"]),
        ),
        Tool(
            name="update_offering",
            description="Update an existing offering. The requester token must be authorized for the "
                        "target organization (the new one when organization_code is given).",
            inputSchema=_object({
                "id": {**ID_PROPERTY, "description": "Offering ID to update (required)"},
                "name": {"type": "string", "maxLength": 255, "description": "Offering name (optional)"},
                "description": {"type": "string", "description": "Offering description (optional)"},
                "price": {"type": "number", "exclusiveMinimum": 0, "description": "Price (optional, positive)"},
                "duration": {**ID_PROPERTY, "description": "Duration in minutes (optional)"},
                "category": {"type": "string", "maxLength": 100, "description": "Category (optional)"},
                "organization_code": {**ID_PROPERTY, "description": f"{ORGANIZATION_CODE_DESCRIPTION} (optional)"},
                "requester_token": REQUESTER_TOKEN,
            }, required=["id", "requester_token"]),
        ),
        Tool(
            name="delete_offering",
            description="Delete an offering by ID. The requester token must be authorized for its organization.",
            inputSchema=_object({
                "id": {**ID_PROPERTY, "description": "Offering ID to delete (required)"},
                "requester_token": REQUESTER_TOKEN,
            }, required=["id", "requester_token"]),
        ),
    ]

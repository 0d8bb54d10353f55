"""Tests for tool handlers using a recording stub gateway."""
import re

import pytest

from booking_mcp import handlers
from booking_mcp.defaults import no_contact_defaults
from booking_mcp.formatters import parse_envelope

from .conftest import StubGateway, make_offering, make_organization, make_staff

MUTATIONS = ("create_offering", "update_offering", "delete_offering")


def assert_failure(result, fragment: str) -> dict:
    body = parse_envelope(result)
    assert result.isError is True
    assert body["success"] is False
    assert body["data"] is None
    assert fragment.lower() in body["error"].lower()
    return body


def assert_success(result) -> dict:
    body = parse_envelope(result)
    assert not result.isError
    assert body["success"] is True
    assert len(result.content) == 1
    return body


class TestOrganizationHandlers:
    """Organizations need no authorization."""

    @pytest.mark.asyncio
    async def test_list_returns_count_and_message(self):
        gateway = StubGateway(organizations=[make_organization(1), make_organization(2, name="Other")])

        body = assert_success(await handlers.handle_list_organizations({}, gateway))

        assert body["count"] == 2
        assert body["message"] == "Found 2 organization(s)"
        assert len(body["data"]) == 2

    @pytest.mark.asyncio
    async def test_list_empty_is_success(self):
        body = assert_success(await handlers.handle_list_organizations({"name": "zzz"}, StubGateway()))
        assert body["data"] == []
        assert body["count"] == 0

    @pytest.mark.asyncio
    async def test_create(self):
        gateway = StubGateway()
        body = assert_success(await handlers.handle_create_organization({"name": "Acme"}, gateway))

        assert body["data"]["name"] == "Acme"
        assert body["data"]["id"] > 0
        assert body["data"]["created_at"] and body["data"]["updated_at"]
        assert "count" not in body
        assert body["message"] == 'Organization "Acme" created successfully with ID 1'
        assert gateway.called("check_authorization") == []

    @pytest.mark.asyncio
    async def test_validation_failure_makes_no_store_call(self):
        gateway = StubGateway()
        assert_failure(await handlers.handle_create_organization({"email": "bad"}, gateway), "name")
        assert gateway.calls == []

    @pytest.mark.asyncio
    async def test_update_missing_fails_before_update(self):
        gateway = StubGateway()
        assert_failure(
            await handlers.handle_update_organization({"id": 42, "name": "New"}, gateway),
            "Organization with ID 42 not found",
        )
        assert gateway.called("update_organization") == []

    @pytest.mark.asyncio
    async def test_update_passes_only_supplied_fields(self):
        gateway = StubGateway(organizations=[make_organization(1)])
        body = assert_success(await handlers.handle_update_organization({"id": 1, "phone": "555"}, gateway))

        assert gateway.called("update_organization") == [("update_organization", 1, {"phone": "555"})]
        assert body["data"]["phone"] == "555"
        assert body["message"] == 'Organization "Acme Salon" updated successfully'

    @pytest.mark.asyncio
    async def test_delete_twice(self):
        gateway = StubGateway(organizations=[make_organization(5)])

        first = assert_success(await handlers.handle_delete_organization({"id": 5}, gateway))
        assert first["data"] == {"id": 5, "name": "Acme Salon"}
        assert first["message"] == 'Organization "Acme Salon" deleted successfully'

        assert_failure(await handlers.handle_delete_organization({"id": 5}, gateway), "not found")
        assert len(gateway.called("delete_organization")) == 1


class TestStaffHandlers:
    """Staff creation synthesizes contact details by default."""

    @pytest.mark.asyncio
    async def test_list_requires_organization_scope(self):
        gateway = StubGateway()
        assert_failure(await handlers.handle_list_staff({}, gateway), "organization_code")
        assert gateway.calls == []

    @pytest.mark.asyncio
    async def test_list_scoped(self):
        gateway = StubGateway(staff=[make_staff(1, organization_code=1), make_staff(2, organization_code=2)])
        body = assert_success(await handlers.handle_list_staff({"organization_code": 1}, gateway))
        assert [s["id"] for s in body["data"]] == [1]
        assert body["message"] == "Found 1 staff member(s)"

    @pytest.mark.asyncio
    async def test_create_synthesizes_email_and_phone(self):
        gateway = StubGateway()
        body = assert_success(await handlers.handle_create_staff({"name": "Ana", "organization_code": 1}, gateway))

        assert re.fullmatch(r"staff_\d+_[a-z0-9]{5}@staff\.example\.com", body["data"]["email"])
        assert re.fullmatch(r"\+1[1-9]\d{9}", body["data"]["phone"])

    @pytest.mark.asyncio
    async def test_create_keeps_supplied_contact(self):
        gateway = StubGateway()
        body = assert_success(await handlers.handle_create_staff(
            {"name": "Ana", "organization_code": 1, "email": "ana@example.com", "phone": "+15550001111"},
            gateway,
        ))

        assert body["data"]["email"] == "ana@example.com"
        assert body["data"]["phone"] == "+15550001111"

    @pytest.mark.asyncio
    async def test_create_without_synthesis_requires_email(self):
        gateway = StubGateway()
        create = handlers.get_handler_map(no_contact_defaults)["create_staff"]

        assert_failure(await create({"name": "Ana", "organization_code": 1}, gateway), "email")
        assert gateway.calls == []

    @pytest.mark.asyncio
    async def test_create_under_unknown_organization(self):
        gateway = StubGateway()
        assert_failure(
            await handlers.handle_create_staff({"name": "Ana", "organization_code": 99}, gateway),
            "Organization with code 99 not found",
        )

    @pytest.mark.asyncio
    async def test_staff_mutations_need_no_authorization(self):
        gateway = StubGateway(staff=[make_staff(1)])
        assert_success(await handlers.handle_update_staff({"id": 1, "name": "Ana Maria"}, gateway))
        assert_success(await handlers.handle_delete_staff({"id": 1}, gateway))
        assert gateway.called("check_authorization") == []

    @pytest.mark.asyncio
    async def test_update_missing(self):
        gateway = StubGateway()
        assert_failure(await handlers.handle_update_staff({"id": 3, "name": "X"}, gateway), "Staff member with ID 3 not found")
        assert gateway.called("update_staff") == []


class TestOfferingHandlers:
    """Offering mutations are gated by the requester token."""

    CREATE = {
        "name": "Haircut",
        "price": 25,
        "duration": 30,
        "organization_code": 1,
        "requester_token": "T1",
    }

    @pytest.mark.asyncio
    async def test_create_authorized(self):
        gateway = StubGateway(authorized_tokens={1: {"T1"}})
        body = assert_success(await handlers.handle_create_offering(dict(self.CREATE), gateway))

        assert body["data"]["name"] == "Haircut"
        assert gateway.called("check_authorization") == [("check_authorization", "T1", 1)]

    @pytest.mark.asyncio
    async def test_token_is_not_persisted(self):
        gateway = StubGateway(authorized_tokens={1: {"T1"}})
        await handlers.handle_create_offering(dict(self.CREATE), gateway)

        [(_, values)] = gateway.called("create_offering")
        assert "requester_token" not in values
        assert values["organization_code"] == 1

    @pytest.mark.asyncio
    async def test_create_unauthorized(self):
        gateway = StubGateway(authorized_tokens={1: {"someone-else"}})
        assert_failure(await handlers.handle_create_offering(dict(self.CREATE), gateway), "not authorized")
        assert gateway.called("create_offering") == []

    @pytest.mark.asyncio
    async def test_update_unauthorized_makes_no_mutation(self):
        gateway = StubGateway(offerings=[make_offering(1, organization_code=1)])
        assert_failure(
            await handlers.handle_update_offering({"id": 1, "price": 30, "requester_token": "T1"}, gateway),
            "not authorized",
        )
        assert all(not gateway.called(name) for name in MUTATIONS)

    @pytest.mark.asyncio
    async def test_update_scope_defaults_to_existing_organization(self):
        gateway = StubGateway(authorized_tokens={3: {"T1"}}, offerings=[make_offering(1, organization_code=3)])
        body = assert_success(
            await handlers.handle_update_offering({"id": 1, "price": 30, "requester_token": "T1"}, gateway)
        )

        assert gateway.called("check_authorization") == [("check_authorization", "T1", 3)]
        assert gateway.called("update_offering") == [("update_offering", 1, {"price": 30.0})]
        assert body["data"]["price"] == 30.0

    @pytest.mark.asyncio
    async def test_update_scope_uses_supplied_organization(self):
        # Authorized for the current organization but not the target one
        gateway = StubGateway(authorized_tokens={3: {"T1"}}, offerings=[make_offering(1, organization_code=3)])
        assert_failure(
            await handlers.handle_update_offering({"id": 1, "organization_code": 4, "requester_token": "T1"}, gateway),
            "not authorized",
        )
        assert gateway.called("check_authorization") == [("check_authorization", "T1", 4)]
        assert gateway.called("update_offering") == []

    @pytest.mark.asyncio
    async def test_update_missing_fails_before_authorization(self):
        gateway = StubGateway(authorized_tokens={1: {"T1"}})
        assert_failure(
            await handlers.handle_update_offering({"id": 9, "requester_token": "T1"}, gateway),
            "Offering with ID 9 not found",
        )
        assert gateway.called("check_authorization") == []
        assert gateway.called("update_offering") == []

    @pytest.mark.asyncio
    async def test_delete_authorized(self):
        gateway = StubGateway(authorized_tokens={1: {"T1"}}, offerings=[make_offering(4, name="Shave")])
        body = assert_success(await handlers.handle_delete_offering({"id": 4, "requester_token": "T1"}, gateway))

        assert body["data"] == {"id": 4, "name": "Shave"}
        assert body["message"] == 'Offering "Shave" deleted successfully'

    @pytest.mark.asyncio
    async def test_delete_unauthorized(self):
        gateway = StubGateway(offerings=[make_offering(4)])
        assert_failure(await handlers.handle_delete_offering({"id": 4, "requester_token": "T9"}, gateway), "not authorized")
        assert gateway.called("delete_offering") == []

    @pytest.mark.asyncio
    async def test_delete_requires_token(self):
        gateway = StubGateway(offerings=[make_offering(4)])
        assert_failure(await handlers.handle_delete_offering({"id": 4}, gateway), "requester_token")
        assert gateway.calls == []

    @pytest.mark.asyncio
    async def test_listing_needs_no_authorization(self):
        gateway = StubGateway(offerings=[make_offering(1, organization_code=7)])
        body = assert_success(await handlers.handle_list_offerings({"organization_code": 7}, gateway))

        assert body["count"] == 1
        assert gateway.called("check_authorization") == []


class TestDispatch:
    """Name-based dispatch and the catch-all boundary."""

    @pytest.mark.asyncio
    async def test_unknown_tool(self):
        result = await handlers.dispatch("drop_tables", {}, StubGateway(), handlers.get_handler_map())
        assert_failure(result, "Unknown tool: drop_tables")

    @pytest.mark.asyncio
    async def test_none_arguments_treated_as_empty(self):
        result = await handlers.dispatch("list_organizations", None, StubGateway(), handlers.get_handler_map())
        assert_success(result)

    @pytest.mark.asyncio
    async def test_unexpected_exception_is_enveloped(self):
        class BrokenGateway(StubGateway):
            async def list_organizations(self, filters):
                raise RuntimeError("boom")

        result = await handlers.dispatch("list_organizations", {}, BrokenGateway(), handlers.get_handler_map())
        assert_failure(result, "RuntimeError: boom")

    def test_handler_map_covers_every_tool(self):
        from booking_mcp.tools import get_tools

        assert set(handlers.get_handler_map()) == {tool.name for tool in get_tools()}

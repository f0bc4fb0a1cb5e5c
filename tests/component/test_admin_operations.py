"""
Component Tests for admin operations: status control, deletion, catalog, accounts.
"""

import asyncio
from decimal import Decimal

import pytest

from storefront.modules.accounts import AccountAlreadyExistsError
from storefront.modules.admin import AdminAccountInput
from storefront.modules.catalog import ServiceCreateInput, ServiceInUseError, ServiceNotFoundError, ServiceUpdateInput
from storefront.modules.common import (
    ConflictError,
    ForbiddenError,
    InvalidInputError,
    InvalidTransitionError,
)
from storefront.modules.orders import OrderEditInput, OrderStatus

pytestmark = pytest.mark.component


@pytest.fixture
async def placed(lifecycle, make_account, make_service, order_input):
    """A user with $50.00 who has placed a $20.00 order."""
    user = await make_account("buyer", balance="50")
    service = await make_service("10")
    receipt = await lifecycle.place_order(user, order_input(service.id, 2000))
    return user, service, receipt.order


class TestStatusTransitions:
    async def test_full_lifecycle(self, admin_ops, admin, placed):
        _, _, order = placed

        processing = await admin_ops.advance(admin, order.id)
        assert processing.status is OrderStatus.PROCESSING

        reverted = await admin_ops.revert(admin, order.id)
        assert reverted.status is OrderStatus.PENDING_REVIEW

        await admin_ops.change_status(admin, order.id, "processing")
        completed = await admin_ops.change_status(admin, order.id, OrderStatus.COMPLETED)
        assert completed.status is OrderStatus.COMPLETED
        assert completed.version == order.version + 4

    async def test_illegal_transitions(self, admin_ops, admin, placed):
        _, _, order = placed
        with pytest.raises(InvalidTransitionError):
            await admin_ops.change_status(admin, order.id, OrderStatus.COMPLETED)
        with pytest.raises(InvalidTransitionError):
            await admin_ops.revert(admin, order.id)

    async def test_completed_orders_reject_every_write(self, lifecycle, admin_ops, admin, placed, balance_of):
        user, _, order = placed
        await admin_ops.advance(admin, order.id)
        await admin_ops.advance(admin, order.id)

        with pytest.raises(InvalidTransitionError):
            await lifecycle.edit_order(user, order.id, OrderEditInput(notes="too late"))
        with pytest.raises(InvalidTransitionError):
            await admin_ops.delete_order(admin, order.id)
        with pytest.raises(InvalidTransitionError):
            await admin_ops.revert(admin, order.id)
        with pytest.raises(InvalidTransitionError):
            await admin_ops.advance(admin, order.id)

        assert (await lifecycle.get_order(user, order.id)).status is OrderStatus.COMPLETED
        assert await balance_of(user) == Decimal("30.00")

    async def test_stale_expected_version(self, admin_ops, admin, placed):
        _, _, order = placed
        await admin_ops.advance(admin, order.id)
        with pytest.raises(ConflictError):
            await admin_ops.change_status(admin, order.id, OrderStatus.COMPLETED, expected_version=order.version)

    async def test_concurrent_edit_and_advance_never_both_apply_to_the_same_version(
        self, lifecycle, admin_ops, admin, placed
    ):
        user, _, order = placed
        results = await asyncio.gather(
            lifecycle.edit_order(user, order.id, OrderEditInput(notes="edit"), expected_version=order.version),
            admin_ops.change_status(admin, order.id, OrderStatus.PROCESSING, expected_version=order.version),
            return_exceptions=True,
        )
        failures = [result for result in results if isinstance(result, Exception)]
        assert len(failures) == 1
        assert isinstance(failures[0], ConflictError)

    async def test_users_cannot_use_admin_operations(self, admin_ops, placed):
        user, _, order = placed
        with pytest.raises(ForbiddenError):
            await admin_ops.advance(user, order.id)
        with pytest.raises(ForbiddenError):
            await admin_ops.delete_order(user, order.id)
        with pytest.raises(ForbiddenError):
            await admin_ops.stats(user)


class TestDeletion:
    async def test_processing_order_is_refunded(self, admin_ops, admin, placed, balance_of):
        user, _, order = placed
        await admin_ops.advance(admin, order.id)

        receipt = await admin_ops.delete_order(admin, order.id)

        assert receipt.order.id == order.id
        assert receipt.balance == Decimal("50.00")
        assert await balance_of(user) == Decimal("50.00")
        reconciliation = await admin_ops.reconcile(admin, user.account_id)
        assert reconciliation.consistent


class TestCatalog:
    async def test_crud(self, admin_ops, admin):
        service = await admin_ops.create_service(
            admin,
            ServiceCreateInput(
                name="  Likes ",
                category="tiktok",
                price_per_1000=Decimal("2.5"),
                description="Real-looking likes",
            ),
        )
        assert service.name == "Likes"
        assert service.price_per_1000 == Decimal("2.5")

        updated = await admin_ops.update_service(admin, service.id, ServiceUpdateInput(tag="hot"))
        assert updated.tag == "hot"
        assert updated.name == "Likes"

        await admin_ops.delete_service(admin, service.id)
        with pytest.raises(ServiceNotFoundError):
            await admin_ops.update_service(admin, service.id, ServiceUpdateInput(tag="gone"))

    async def test_invalid_fields(self, admin_ops, admin):
        with pytest.raises(InvalidInputError):
            await admin_ops.create_service(
                admin, ServiceCreateInput(name="", category="x", price_per_1000=Decimal("1"))
            )
        with pytest.raises(InvalidInputError):
            await admin_ops.create_service(
                admin, ServiceCreateInput(name="x", category="x", price_per_1000=Decimal("-1"))
            )

    async def test_service_with_open_orders_cannot_be_deleted(self, lifecycle, admin_ops, admin, placed):
        user, service, order = placed
        with pytest.raises(ServiceInUseError):
            await admin_ops.delete_service(admin, service.id)

        await admin_ops.advance(admin, order.id)
        await admin_ops.advance(admin, order.id)
        await admin_ops.delete_service(admin, service.id)

        completed = await lifecycle.get_order(user, order.id)
        assert completed.service_id is None
        assert completed.total == Decimal("20.00")


class TestAccounts:
    async def test_create_account_with_opening_balance(self, admin_ops, admin):
        created = await admin_ops.create_account(
            admin,
            AdminAccountInput(username="newbie", password="secret123", initial_balance=Decimal("12.50")),
        )
        assert created.balance == Decimal("12.50")
        assert created.account.role == "user"

        reconciliation = await admin_ops.reconcile(admin, created.account.id)
        assert reconciliation.funded_cents == 1250
        assert reconciliation.consistent

    async def test_duplicate_username(self, admin_ops, admin):
        await admin_ops.create_account(admin, AdminAccountInput(username="twin", password="secret123"))
        with pytest.raises(AccountAlreadyExistsError):
            await admin_ops.create_account(admin, AdminAccountInput(username="twin", password="secret123"))

    async def test_invalid_amounts(self, admin_ops, admin, make_account):
        user = await make_account("payee")
        for amount in ("0", "-5", "1.234", "abc"):
            with pytest.raises(InvalidInputError):
                await admin_ops.fund_wallet(admin, user.account_id, amount)

    async def test_fund_wallet(self, admin_ops, admin, make_account):
        user = await make_account("saver")
        snapshot = await admin_ops.fund_wallet(admin, user.account_id, Decimal("25.00"))
        assert snapshot.balance == Decimal("25.00")
        assert (await admin_ops.get_wallet(admin, user.account_id)).balance_cents == 2500

    async def test_ban_and_unban(self, admin_ops, admin, make_account):
        user = await make_account("troll")
        banned = await admin_ops.set_banned(admin, user.account_id, True)
        assert banned.is_banned
        assert banned.to_principal().is_banned
        unbanned = await admin_ops.set_banned(admin, user.account_id, False)
        assert not unbanned.is_banned

    async def test_admin_cannot_ban_self(self, admin_ops, admin):
        with pytest.raises(ForbiddenError):
            await admin_ops.set_banned(admin, admin.account_id, True)

    async def test_list_accounts_includes_balances(self, admin_ops, admin, make_account):
        await make_account("rich", balance="99.99")
        rows = await admin_ops.list_accounts(admin)
        balances = {row.account.username: row.balance for row in rows}
        assert balances["rich"] == Decimal("99.99")
        assert balances["root-admin"] == Decimal("0.00")


class TestStatsAndConservation:
    async def test_stats(self, lifecycle, admin_ops, admin, make_account, make_service, order_input):
        service = await make_service("10")
        user = await make_account("stat-user", balance="100")
        banned = await make_account("stat-banned")
        await admin_ops.set_banned(admin, banned.account_id, True)

        first = await lifecycle.place_order(user, order_input(service.id, 1000))
        await lifecycle.place_order(user, order_input(service.id, 2000))
        await admin_ops.advance(admin, first.order.id)
        await admin_ops.advance(admin, first.order.id)

        stats = await admin_ops.stats(admin)
        assert stats.total_users == 3
        assert stats.banned_users == 1
        assert stats.total_services == 1
        assert stats.orders.completed == 1
        assert stats.orders.pending_review == 1
        assert stats.total_orders == 2
        assert stats.revenue == Decimal("10.00")

    async def test_money_is_conserved_across_operations(
        self, lifecycle, admin_ops, admin, make_account, make_service, order_input
    ):
        service = await make_service("3.3333")
        user = await make_account("ledger-user", balance="100")

        orders = [
            (await lifecycle.place_order(user, order_input(service.id, quantity))).order
            for quantity in (1234, 4321, 999)
        ]
        await lifecycle.edit_order(user, orders[0].id, OrderEditInput(quantity=2000))
        await lifecycle.edit_order(user, orders[1].id, OrderEditInput(quantity=100))
        await admin_ops.advance(admin, orders[1].id)
        await admin_ops.advance(admin, orders[1].id)
        await admin_ops.advance(admin, orders[2].id)
        await admin_ops.delete_order(admin, orders[2].id)
        await admin_ops.fund_wallet(admin, user.account_id, "5.55")

        reconciliation = await admin_ops.reconcile(admin, user.account_id)
        assert reconciliation.consistent
        assert reconciliation.balance_cents >= 0
        assert reconciliation.funded_cents == 10555

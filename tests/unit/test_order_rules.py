"""
Unit Tests for order status rules, the principal and error codes.
"""

import pytest

from storefront.interfaces.http.errors import status_code_for
from storefront.modules.common import (
    UNSET,
    ConflictError,
    ForbiddenError,
    InsufficientFundsError,
    InvalidInputError,
    InvalidTransitionError,
    LedgerError,
    NotFoundError,
    Principal,
    ROLE_ADMIN,
    UnavailableError,
)
from storefront.modules.ledger import DuplicateIdempotencyKeyError
from storefront.modules.orders.models import (
    ALLOWED_TRANSITIONS,
    OrderEditInput,
    OrderStatus,
    check_deletable,
    check_editable,
    check_transition,
    parse_status,
)
from storefront.modules.wallets import LedgerReconciliation

pytestmark = pytest.mark.unit

PENDING = OrderStatus.PENDING_REVIEW
PROCESSING = OrderStatus.PROCESSING
COMPLETED = OrderStatus.COMPLETED


class TestTransitions:
    """Admin state machine"""

    @pytest.mark.parametrize(
        "current, target",
        [(PENDING, PROCESSING), (PROCESSING, COMPLETED), (PROCESSING, PENDING)],
    )
    def test_allowed(self, current, target):
        check_transition(current, target)

    @pytest.mark.parametrize(
        "current, target",
        [
            (PENDING, COMPLETED),
            (PENDING, PENDING),
            (PROCESSING, PROCESSING),
            (COMPLETED, PENDING),
            (COMPLETED, PROCESSING),
            (COMPLETED, COMPLETED),
        ],
    )
    def test_rejected(self, current, target):
        with pytest.raises(InvalidTransitionError):
            check_transition(current, target)

    def test_completed_is_terminal(self):
        assert ALLOWED_TRANSITIONS[COMPLETED] == frozenset()

    def test_only_pending_orders_are_editable(self):
        check_editable(PENDING)
        for status in (PROCESSING, COMPLETED):
            with pytest.raises(InvalidTransitionError):
                check_editable(status)

    def test_completed_orders_cannot_be_deleted(self):
        check_deletable(PENDING)
        check_deletable(PROCESSING)
        with pytest.raises(InvalidTransitionError):
            check_deletable(COMPLETED)

    def test_unknown_status_rejected(self):
        assert parse_status("processing") is PROCESSING
        with pytest.raises(InvalidTransitionError):
            parse_status("shipped")


class TestPrincipal:
    def test_banned_principal_has_no_capabilities(self):
        banned = Principal(account_id="u1", is_banned=True)
        with pytest.raises(ForbiddenError):
            banned.require_active()
        with pytest.raises(ForbiddenError):
            banned.require_owner("u1")
        with pytest.raises(ForbiddenError):
            Principal(account_id="a1", role=ROLE_ADMIN, is_banned=True).require_admin()

    def test_user_is_not_admin(self):
        with pytest.raises(ForbiddenError):
            Principal(account_id="u1").require_admin()

    def test_owner_check(self):
        user = Principal(account_id="u1")
        assert user.require_owner("u1") is user
        with pytest.raises(ForbiddenError):
            user.require_owner("u2")


class TestErrors:
    def test_message_defaults_to_description(self):
        err = InsufficientFundsError(account_id="u1")
        assert err.message == "Wallet balance does not cover the requested debit."
        assert err.details == {"account_id": "u1"}
        assert err.code == "insufficient_funds"

    def test_only_unavailable_is_retryable(self):
        assert UnavailableError().retryable
        assert not LedgerError().retryable
        assert not ConflictError().retryable

    @pytest.mark.parametrize(
        "error, status_code",
        [
            (InvalidInputError(), 400),
            (NotFoundError(), 404),
            (InsufficientFundsError(), 402),
            (InvalidTransitionError(), 409),
            (ConflictError(), 409),
            (DuplicateIdempotencyKeyError(), 409),
            (ForbiddenError(), 403),
            (UnavailableError(), 503),
        ],
    )
    def test_http_status_mapping(self, error, status_code):
        assert status_code_for(error) == status_code


class TestReconciliation:
    def test_consistent_when_money_is_conserved(self):
        # funded 100, completed 20, open 30 -> balance must be 50
        assert LedgerReconciliation("u1", 5000, 3000, 10000, 2000).consistent
        assert not LedgerReconciliation("u1", 5100, 3000, 10000, 2000).consistent


def test_edit_input_defaults_to_no_changes():
    changes = OrderEditInput()
    assert changes.quantity is UNSET and changes.target_url is UNSET and changes.notes is UNSET

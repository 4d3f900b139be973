"""
Debt use cases - lifecycle of a debt record against the record store

Every mutating use case reads the record, lets the domain rules compute a
patch, then writes it with expected_version so a concurrent writer is
detected (ConflictError) instead of silently losing a payment.
"""
import logging
from datetime import date
from typing import List

from finledger.application.ownership import ensure_owned
from finledger.domain.debt import (
    DEBT_TYPE_I_OWE,
    DEBT_TYPE_OWED_TO_ME,
    Debt,
    DebtSummary,
    derive_counterparty_names,
    is_overdue,
    summarize,
)
from finledger.infrastructure.store.base import RecordStore
from finledger.utils.clock import utcnow

logger = logging.getLogger(__name__)


class CreateDebtUseCase:
    """Use case: register a new active debt"""

    def __init__(self, store: RecordStore):
        self.store = store

    def execute(
        self,
        owner_id: str,
        creditor_name: str,
        debt_type: str,
        original_amount,
        currency: str = "TND",
        debtor_name: str | None = None,
        due_date: date | None = None,
        debt_date: date | None = None,
        priority: str | None = None,
        minimum_payment=None,
        interest_rate="0",
        payment_frequency: str | None = None,
        category_id: int | None = None,
        description: str = "",
        today: date | None = None,
    ):
        """
        Create a debt

        Priority and minimum payment are derived from the amount when not supplied.

        Returns:
            The stored DebtRecord
        """
        fields = Debt.create(
            owner_id=owner_id,
            creditor_name=creditor_name,
            debt_type=debt_type,
            original_amount=original_amount,
            today=today or utcnow().date(),
            currency=currency,
            debtor_name=debtor_name,
            due_date=due_date,
            debt_date=debt_date,
            priority=priority,
            minimum_payment=minimum_payment,
            interest_rate=interest_rate,
            payment_frequency=payment_frequency,
            category_id=category_id,
            description=description,
        )
        debt = self.store.insert_debt(fields)
        self.store.commit()

        logger.info(
            "Debt #%d created for owner %s: %s %s (%s, priority %s)",
            debt.id, owner_id, fields["original_amount"], debt.currency, debt.debt_type, debt.priority,
        )
        return debt


class QuickCreateDebtUseCase:
    """Use case: register a debt from a one-line note ("ahmed lunch money")"""

    def __init__(self, store: RecordStore):
        self.store = store

    def execute(
        self,
        owner_id: str,
        description: str,
        direction: str,
        amount,
        owner_name: str | None = None,
        due_date: date | None = None,
        today: date | None = None,
    ):
        creditor, debtor = derive_counterparty_names(description, direction, owner_name)
        debt_type = DEBT_TYPE_OWED_TO_ME if direction == "given" else DEBT_TYPE_I_OWE
        return CreateDebtUseCase(self.store).execute(
            owner_id=owner_id,
            creditor_name=creditor,
            debtor_name=debtor,
            debt_type=debt_type,
            original_amount=amount,
            due_date=due_date,
            description=description.strip(),
            today=today,
        )


class ApplyDebtPaymentUseCase:
    """Use case: pay part (or all) of a debt"""

    def __init__(self, store: RecordStore):
        self.store = store

    def execute(self, owner_id: str, debt_id: int, amount, today: date | None = None):
        """
        Raises:
            InvalidAmount: amount <= 0
            OverpaymentError: amount > remaining_amount
            ValidationError: debt cancelled
            NotFoundError: no such debt for this owner
            ConflictError: debt changed since it was read
        """
        debt = ensure_owned(self.store.get_debt(debt_id, for_update=True), owner_id, "Debt")
        patch = Debt.payment(debt, amount, today or utcnow().date())

        updated = self.store.update_debt(debt_id, patch, expected_version=debt.version)
        self.store.commit()

        if updated.is_settled:
            logger.info("Debt #%d fully paid", debt_id)
        else:
            logger.info("Debt #%d payment %s, remaining %s", debt_id, amount, updated.remaining_amount)
        return updated


class SettleDebtUseCase:
    """Use case: write off / mark paid regardless of the remaining balance"""

    def __init__(self, store: RecordStore):
        self.store = store

    def execute(self, owner_id: str, debt_id: int, today: date | None = None):
        debt = ensure_owned(self.store.get_debt(debt_id, for_update=True), owner_id, "Debt")
        patch = Debt.settle(debt, today or utcnow().date())
        if not patch:
            return debt

        written_off = debt.remaining_amount
        updated = self.store.update_debt(debt_id, patch, expected_version=debt.version)
        self.store.commit()
        logger.info("Debt #%d settled (written off %s)", debt_id, written_off)
        return updated


class CancelDebtUseCase:
    """Use case: cancel an active debt; no payments are accepted afterwards"""

    def __init__(self, store: RecordStore):
        self.store = store

    def execute(self, owner_id: str, debt_id: int):
        debt = ensure_owned(self.store.get_debt(debt_id, for_update=True), owner_id, "Debt")
        patch = Debt.cancel(debt)
        if not patch:
            return debt

        updated = self.store.update_debt(debt_id, patch, expected_version=debt.version)
        self.store.commit()
        logger.info("Debt #%d cancelled", debt_id)
        return updated


class CorrectDebtBalanceUseCase:
    """Use case: administrative correction of remaining_amount"""

    def __init__(self, store: RecordStore):
        self.store = store

    def execute(self, owner_id: str, debt_id: int, remaining_amount, today: date | None = None):
        debt = ensure_owned(self.store.get_debt(debt_id, for_update=True), owner_id, "Debt")
        patch = Debt.correct_balance(debt, remaining_amount, today or utcnow().date())

        previous = debt.remaining_amount
        updated = self.store.update_debt(debt_id, patch, expected_version=debt.version)
        self.store.commit()
        logger.info("Debt #%d balance corrected: %s -> %s", debt_id, previous, updated.remaining_amount)
        return updated


class DeleteDebtUseCase:

    def __init__(self, store: RecordStore):
        self.store = store

    def execute(self, owner_id: str, debt_id: int) -> None:
        ensure_owned(self.store.get_debt(debt_id), owner_id, "Debt")
        self.store.delete_debt(debt_id)
        self.store.commit()


def get_debt_summary(store: RecordStore, owner_id: str, today: date | None = None) -> DebtSummary:
    """Owner-level totals over all debts (see domain.debt.summarize)."""
    return summarize(store.list_debts(owner_id), today or utcnow().date())


def list_overdue_debts(store: RecordStore, owner_id: str, today: date | None = None) -> List:
    """Unsettled debts past their due date, earliest due first."""
    today = today or utcnow().date()
    overdue = [d for d in store.list_debts(owner_id) if is_overdue(d, today)]
    return sorted(overdue, key=lambda d: (d.due_date, d.id))

from datetime import date
from decimal import Decimal
import uuid

from statement_import.common.models import StatementDraftEntry
from statement_import.core.duplicates import DuplicateWindow
from statement_import.core.reference import PriorMovement

ACCOUNT = uuid.uuid4()
OTHER_ACCOUNT = uuid.uuid4()


def entry(day, amount, subject):
    return StatementDraftEntry(booking_date=day, amount=Decimal(amount), subject=subject)


class TestDuplicateWindow:

    def test_matches_date_amount_and_subject(self):
        prior = [PriorMovement(date(2024, 3, 1), Decimal("-50.00"), "Rent", ACCOUNT)]
        window = DuplicateWindow(prior, since=date(2024, 3, 1), account_id=ACCOUNT)

        assert window.contains(entry(date(2024, 3, 1), "-50.00", "rent"))
        assert not window.contains(entry(date(2024, 3, 1), "-50.01", "Rent"))
        assert not window.contains(entry(date(2024, 3, 2), "-50.00", "Rent"))
        assert not window.contains(entry(date(2024, 3, 1), "-50.00", "Rent March"))

    def test_amount_scale_does_not_matter(self):
        prior = [PriorMovement(date(2024, 3, 1), Decimal("-50"), "Rent")]
        window = DuplicateWindow(prior, since=date(2024, 1, 1))

        assert window.contains(entry(date(2024, 3, 1), "-50.00", "Rent"))

    def test_movements_before_window_are_ignored(self):
        prior = [PriorMovement(date(2024, 2, 28), Decimal("-50.00"), "Rent")]
        window = DuplicateWindow(prior, since=date(2024, 3, 1))

        assert len(window) == 0

    def test_other_accounts_are_ignored(self):
        prior = [
            PriorMovement(date(2024, 3, 1), Decimal("-50.00"), "Rent", OTHER_ACCOUNT),
            PriorMovement(date(2024, 3, 2), Decimal("-9.99"), "Music", None),
        ]
        window = DuplicateWindow(prior, since=date(2024, 3, 1), account_id=ACCOUNT)

        assert not window.contains(entry(date(2024, 3, 1), "-50.00", "Rent"))
        # statement entries without account always count
        assert window.contains(entry(date(2024, 3, 2), "-9.99", "Music"))

    def test_without_account_only_unassigned_movements_count(self):
        prior = [PriorMovement(date(2024, 3, 1), Decimal("-50.00"), "Rent", ACCOUNT)]
        window = DuplicateWindow(prior, since=date(2024, 3, 1))

        assert len(window) == 0

    def test_for_entries_uses_earliest_date(self):
        prior = [PriorMovement(date(2024, 3, 1), Decimal("-50.00"), "Rent")]
        entries = [entry(date(2024, 3, 5), "1.00", "x"), entry(date(2024, 3, 1), "-50.00", "Rent"),
                   StatementDraftEntry(booking_date=None, amount=Decimal("0"))]

        window = DuplicateWindow.for_entries(prior, entries)

        assert window.since == date(2024, 3, 1)
        assert window.contains(entries[1])
        assert not window.contains(entries[2])

    def test_empty(self):
        assert len(DuplicateWindow([], since=date(2024, 3, 1))) == 0
        assert len(DuplicateWindow.for_entries([PriorMovement(date(2024, 3, 1), Decimal("1"))], [])) == 0

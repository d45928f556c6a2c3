"""
Duplicate window: already booked movements a new draft entry is checked
against before it gets classified.
"""
from datetime import date
from typing import Iterable, Optional, Set, Tuple
import uuid

import pandas as pd

from ..common.models import StatementDraftEntry
from .reference import PriorMovement

DuplicateKey = Tuple[date, object, str]

COLUMNS = ['booking_date', 'amount', 'subject', 'account_id']


def duplicate_key(booking_date: date, amount, subject: Optional[str]) -> DuplicateKey:
    return booking_date, amount, (subject or '').casefold()


class DuplicateWindow:
    """
    Keys (date, amount, subject) of prior movements booked on or after
    `since` that belong to `account_id` or to no account at all.
    """

    def __init__(self, prior_movements: Iterable[PriorMovement], since: Optional[date],
                 account_id: Optional[uuid.UUID] = None):
        self.since = since
        self.account_id = account_id
        self._keys: Set[DuplicateKey] = set()
        if since is not None:
            self._keys = self._build_keys(prior_movements)

    @classmethod
    def for_entries(cls, prior_movements: Iterable[PriorMovement], entries: Iterable[StatementDraftEntry],
                    account_id: Optional[uuid.UUID] = None) -> 'DuplicateWindow':
        dates = [e.booking_date for e in entries if e.booking_date is not None]
        return cls(prior_movements, min(dates) if dates else None, account_id)

    def _build_keys(self, prior_movements: Iterable[PriorMovement]) -> Set[DuplicateKey]:
        df = pd.DataFrame(
            [{'booking_date': p.booking_date, 'amount': p.amount, 'subject': p.subject, 'account_id': p.account_id}
             for p in prior_movements],
            columns=COLUMNS,
        )
        if df.empty:
            return set()

        df['booking_date'] = pd.to_datetime(df['booking_date']).dt.date
        in_range = df['booking_date'] >= self.since
        own_account = df['account_id'].isna()
        if self.account_id is not None:
            own_account = own_account | (df['account_id'] == self.account_id)
        window = df[in_range & own_account]

        return {
            duplicate_key(d, amount, subject)
            for d, amount, subject in zip(window['booking_date'], window['amount'], window['subject'])
        }

    def __len__(self):
        return len(self._keys)

    def contains(self, entry: StatementDraftEntry) -> bool:
        if entry.booking_date is None:
            return False
        return duplicate_key(entry.booking_date, entry.amount, entry.subject) in self._keys

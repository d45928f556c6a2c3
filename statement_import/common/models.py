from dataclasses import dataclass, field, fields
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import List, Optional
import uuid


class SecurityTransactionType(str, Enum):
    BUY = 'Buy'
    SELL = 'Sell'
    DIVIDEND = 'Dividend'


class EntryStatus(str, Enum):
    OPEN = 'open'
    ANNOUNCED = 'announced'
    ACCOUNTED = 'accounted'
    NEEDS_CHECK = 'needs_check'
    ALREADY_BOOKED = 'already_booked'


@dataclass
class StatementHeader:
    """
    Document-level data collected while parsing one statement file.
    """
    account_number: str = ''
    iban: Optional[str] = None
    bank_code: Optional[str] = None
    account_holder: Optional[str] = None
    period_start: Optional[date] = None
    period_end: Optional[date] = None
    description: str = ''


@dataclass
class StatementMovement:
    """
    Canonical representation of one movement read from a statement.
    Amounts are signed; debits are negative.
    """
    booking_date: Optional[date] = None
    valuta_date: Optional[date] = None
    amount: Decimal = Decimal('0')
    currency_code: Optional[str] = None
    subject: Optional[str] = None
    counterparty: Optional[str] = None
    posting_description: Optional[str] = None
    quantity: Optional[Decimal] = None
    tax_amount: Optional[Decimal] = None
    fee_amount: Optional[Decimal] = None
    security_transaction_type: Optional[SecurityTransactionType] = None
    is_preview: bool = False
    is_error: bool = False

    def is_set(self) -> bool:
        """A movement counts only with a booking date, an amount or a subject."""
        if self.amount == 0 and not (self.subject or '').strip() and self.booking_date is None:
            return False
        return True

    def to_dict(self):
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass
class StatementParseResult:
    header: StatementHeader
    movements: List[StatementMovement]

    def to_dataframe(self):
        import pandas as pd
        columns = [f.name for f in fields(StatementMovement)]
        return pd.DataFrame([m.to_dict() for m in self.movements], columns=columns)


@dataclass
class StatementDraftEntry:
    """
    A movement imported into a draft, plus the links the classifier
    resolved for it.
    """
    booking_date: Optional[date]
    amount: Decimal
    subject: str = ''
    counterparty: Optional[str] = None
    posting_description: Optional[str] = None
    valuta_date: Optional[date] = None
    currency_code: str = 'EUR'
    is_announced: bool = False
    status: EntryStatus = EntryStatus.OPEN
    contact_id: Optional[uuid.UUID] = None
    savings_plan_id: Optional[uuid.UUID] = None
    security_id: Optional[uuid.UUID] = None
    security_transaction_type: Optional[SecurityTransactionType] = None
    security_quantity: Optional[Decimal] = None
    security_fee_amount: Optional[Decimal] = None
    security_tax_amount: Optional[Decimal] = None
    is_cost_neutral: bool = False
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    @classmethod
    def from_movement(cls, movement: StatementMovement) -> 'StatementDraftEntry':
        return cls(
            booking_date=movement.booking_date,
            amount=movement.amount,
            subject=movement.subject or '',
            counterparty=(movement.counterparty or '').strip() or None,
            posting_description=(movement.posting_description or '').strip() or None,
            valuta_date=movement.valuta_date,
            currency_code=movement.currency_code or 'EUR',
            is_announced=movement.is_preview,
            status=EntryStatus.ANNOUNCED if movement.is_preview else EntryStatus.OPEN,
            security_transaction_type=movement.security_transaction_type,
            security_quantity=movement.quantity,
            security_fee_amount=movement.fee_amount,
            security_tax_amount=movement.tax_amount,
        )

    def mark_accounted(self, contact_id: uuid.UUID):
        self.contact_id = contact_id
        self.status = EntryStatus.ACCOUNTED

    def assign_contact_without_accounting(self, contact_id: uuid.UUID):
        # status stays open/announced until the contact is confirmed
        self.contact_id = contact_id

    def mark_already_booked(self):
        self.status = EntryStatus.ALREADY_BOOKED

    def mark_needs_check(self):
        self.status = EntryStatus.NEEDS_CHECK

    def mark_cost_neutral(self, is_cost_neutral: bool):
        self.is_cost_neutral = is_cost_neutral

    def reset_open(self):
        self.status = EntryStatus.ANNOUNCED if self.is_announced else EntryStatus.OPEN
        self.is_cost_neutral = False

    def assign_savings_plan(self, savings_plan_id: Optional[uuid.UUID]):
        self.savings_plan_id = savings_plan_id

    def set_security(self, security_id: Optional[uuid.UUID]):
        self.security_id = security_id
        if security_id is None:
            self.security_transaction_type = None
            self.security_quantity = None
            self.security_fee_amount = None
            self.security_tax_amount = None


@dataclass
class StatementDraft:
    original_file_name: str
    account_name: Optional[str] = None
    description: str = ''
    detected_account_id: Optional[uuid.UUID] = None
    entries: List[StatementDraftEntry] = field(default_factory=list)
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    @classmethod
    def from_parse_result(cls, file_name: str, result: StatementParseResult) -> 'StatementDraft':
        header = result.header
        account = header.iban or header.account_number or None
        draft = cls(original_file_name=file_name, account_name=account, description=header.description)
        draft.entries = [StatementDraftEntry.from_movement(m) for m in result.movements]
        return draft

    def set_detected_account(self, account_id: uuid.UUID):
        self.detected_account_id = account_id

"""
Reference data the classifier matches movements against.

These are plain in-memory records supplied by the caller (contacts,
accounts, savings plans, securities and already booked movements).
"""
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import List, Optional
import uuid


class ContactType(str, Enum):
    SELF = 'Self'
    BANK = 'Bank'
    PERSON = 'Person'
    ORGANIZATION = 'Organization'
    OTHER = 'Other'


@dataclass
class Contact:
    """
    Attributes:
        aliases: Glob patterns ('*' and '?') matched case-insensitively
            against the normalized counterparty
        is_payment_intermediary: PayPal & co. The real counterparty is
            looked up in the subject instead.
    """
    name: str
    type: ContactType = ContactType.ORGANIZATION
    aliases: List[str] = field(default_factory=list)
    is_payment_intermediary: bool = False
    id: uuid.UUID = field(default_factory=uuid.uuid4)


@dataclass
class Account:
    name: str
    iban: Optional[str] = None
    bank_contact_id: Optional[uuid.UUID] = None
    expects_savings_plans: bool = False
    id: uuid.UUID = field(default_factory=uuid.uuid4)


@dataclass
class SavingsPlan:
    name: str
    contract_number: Optional[str] = None
    is_active: bool = True
    id: uuid.UUID = field(default_factory=uuid.uuid4)


@dataclass
class Security:
    name: str
    identifier: Optional[str] = None
    is_active: bool = True
    id: uuid.UUID = field(default_factory=uuid.uuid4)


@dataclass
class PriorMovement:
    """
    A movement that is already booked: a bank posting of an account, or an
    entry of a previously imported statement (account_id None).
    """
    booking_date: date
    amount: Decimal
    subject: str = ''
    account_id: Optional[uuid.UUID] = None

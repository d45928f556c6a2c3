from .classifier import StatementClassifier
from .duplicates import DuplicateWindow
from .reference import Account, Contact, ContactType, PriorMovement, SavingsPlan, Security

__all__ = [
    'StatementClassifier',
    'DuplicateWindow',
    'Account',
    'Contact',
    'ContactType',
    'PriorMovement',
    'SavingsPlan',
    'Security',
]

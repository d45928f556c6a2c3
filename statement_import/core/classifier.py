"""
Classification of statement draft entries.

For every entry the classifier
- marks it already booked when it duplicates a prior movement,
- resolves the counterparty to a contact (name, containment, alias),
- links a savings plan for transfers to the own savings accounts,
- links a security for securities postings.

Announced (preview) entries are left untouched apart from the duplicate
check.
"""
from collections import Counter
from typing import Iterable, List, Optional, Pattern, Tuple
import uuid

from ..common.logging_config import get_logger
from ..common.models import EntryStatus, StatementDraft, StatementDraftEntry
from .duplicates import DuplicateWindow
from .normalize import (
    glob_to_regex, normalize_contract_number, normalize_iban, normalize_name,
    normalize_security_text, strip_whitespace,
)
from .reference import Account, Contact, ContactType, PriorMovement, SavingsPlan, Security

logger = get_logger(__name__)


class StatementClassifier:

    def __init__(self, contacts: Iterable[Contact], accounts: Iterable[Account] = (),
                 savings_plans: Iterable[SavingsPlan] = (), securities: Iterable[Security] = (),
                 prior_movements: Iterable[PriorMovement] = ()):
        self.contacts: List[Contact] = list(contacts)
        self.self_contact = next((c for c in self.contacts if c.type == ContactType.SELF), None)
        if self.self_contact is None:
            raise ValueError("Classification needs a contact of type Self")

        self.accounts: List[Account] = list(accounts)
        self.savings_plans = [p for p in savings_plans if p.is_active]
        self.securities = sorted((s for s in securities if s.is_active), key=lambda s: s.name or '')
        self.prior_movements: List[PriorMovement] = list(prior_movements)

        self._named = [(normalize_name(c.name), c) for c in self.contacts if (c.name or '').strip()]
        self._aliases = self._compile_aliases()

    def _compile_aliases(self) -> List[Tuple[Pattern, Contact]]:
        patterns = [
            (alias.strip(), contact)
            for contact in self.contacts
            for alias in contact.aliases
            if alias and alias.strip()
        ]
        # longest pattern first, sorted() keeps contact order for ties
        patterns = sorted(patterns, key=lambda item: len(item[0]), reverse=True)
        return [(glob_to_regex(pattern), contact) for pattern, contact in patterns]

    def _contact(self, contact_id: Optional[uuid.UUID]) -> Optional[Contact]:
        return next((c for c in self.contacts if c.id == contact_id), None)

    def _account(self, account_id: Optional[uuid.UUID]) -> Optional[Account]:
        return next((a for a in self.accounts if a.id == account_id), None)

    # ==========================================================================
    # Draft level
    # ==========================================================================

    def classify(self, draft: StatementDraft, entry_id: Optional[uuid.UUID] = None) -> StatementDraft:
        """
        Classifies all entries of the draft, or only the one with `entry_id`.
        The draft is changed in place and returned.
        """
        self.detect_account(draft)
        account = self._account(draft.detected_account_id)
        bank_contact_id = account.bank_contact_id if account else None

        # the window always spans the whole draft
        window = DuplicateWindow.for_entries(self.prior_movements, draft.entries, draft.detected_account_id)

        entries = [e for e in draft.entries if entry_id is None or e.id == entry_id]
        for entry in entries:
            self.classify_entry(entry, window, account, bank_contact_id)

        counts = Counter(e.status.value for e in entries)
        logger.info(
            f"Classified {len(entries)} entries of {draft.original_file_name}",
            draft_id=str(draft.id),
            account_id=str(draft.detected_account_id) if draft.detected_account_id else None,
            **counts,
        )
        return draft

    def classify_entry(self, entry: StatementDraftEntry, window: DuplicateWindow,
                       account: Optional[Account], bank_contact_id: Optional[uuid.UUID]):
        if entry.status != EntryStatus.ALREADY_BOOKED:
            entry.reset_open()

        if window.contains(entry):
            entry.mark_already_booked()
            return
        if entry.is_announced:
            return

        self.assign_contact(entry, bank_contact_id)
        if account is not None and account.expects_savings_plans:
            self.assign_savings_plan(entry)
        self.assign_security(entry, bank_contact_id)

    def detect_account(self, draft: StatementDraft) -> Optional[uuid.UUID]:
        """
        Resolves the draft's account from its header: exact IBAN, then a
        unique IBAN ending with the header value (account numbers), then the
        only account when the header carries nothing.
        """
        if draft.detected_account_id is not None:
            return draft.detected_account_id

        token = normalize_iban(draft.account_name)
        with_iban = [a for a in self.accounts if a.iban]
        match = None
        if token:
            exact = [a for a in with_iban if normalize_iban(a.iban) == token]
            if exact:
                match = exact[0]
            else:
                similar = [a for a in with_iban if normalize_iban(a.iban).endswith(token)]
                if len(similar) == 1:
                    match = similar[0]
        elif len(self.accounts) == 1:
            match = self.accounts[0]

        if match is None:
            logger.debug(f"No account detected for {draft.original_file_name}", account_name=draft.account_name)
            return None
        draft.set_detected_account(match.id)
        logger.debug(f"Detected account {match.name}", account_id=str(match.id))
        return match.id

    # ==========================================================================
    # Contacts
    # ==========================================================================

    def match_contact(self, search: str) -> Optional[Contact]:
        """
        Args:
            search: Normalized text (see normalize_name)
        """
        for name, contact in self._named:
            if name == search:
                return contact
        for name, contact in self._named:
            if name in search:
                return contact
        for text in (search, strip_whitespace(search)):
            for regex, contact in self._aliases:
                if regex.match(text):
                    return contact
        return None

    def _resolve(self, entry: StatementDraftEntry, search: str,
                 bank_contact_id: Optional[uuid.UUID]) -> Optional[Contact]:
        if not (entry.counterparty or '').strip() and bank_contact_id is not None:
            entry.mark_accounted(bank_contact_id)
            return self._contact(bank_contact_id)

        contact = self.match_contact(search)
        if contact is None:
            return None
        if contact.is_payment_intermediary:
            entry.assign_contact_without_accounting(contact.id)
        else:
            entry.mark_accounted(contact.id)
        return contact

    def assign_contact(self, entry: StatementDraftEntry, bank_contact_id: Optional[uuid.UUID] = None) -> Optional[Contact]:
        contact = self._resolve(entry, normalize_name(entry.counterparty), bank_contact_id)
        if contact is not None and contact.is_payment_intermediary:
            resolved = self._resolve(entry, normalize_name(entry.subject), bank_contact_id)
            contact = resolved or contact

        if contact is None or contact.is_payment_intermediary:
            return contact

        if contact.type == ContactType.BANK and bank_contact_id is not None and contact.id != bank_contact_id:
            # transfer to another of the own banks
            entry.mark_cost_neutral(True)
            entry.mark_accounted(self.self_contact.id)
        elif contact.id == self.self_contact.id:
            entry.mark_cost_neutral(True)
        return contact

    # ==========================================================================
    # Savings plans
    # ==========================================================================

    def assign_savings_plan(self, entry: StatementDraftEntry) -> Optional[SavingsPlan]:
        if entry.contact_id != self.self_contact.id:
            return None

        subject = strip_whitespace(normalize_name(entry.subject))
        subject_contract = normalize_contract_number(entry.subject)
        matches = []
        for plan in self.savings_plans:
            name = strip_whitespace(normalize_name(plan.name))
            if name and name in subject:
                matches.append(plan)
                continue
            contract = normalize_contract_number(plan.contract_number)
            if contract and contract in subject_contract:
                matches.append(plan)

        if not matches:
            return None
        entry.assign_savings_plan(matches[0].id)
        if len(matches) > 1:
            logger.debug("Subject matches several savings plans", entry_id=str(entry.id), matches=len(matches))
            entry.mark_needs_check()
        return matches[0]

    # ==========================================================================
    # Securities
    # ==========================================================================

    def assign_security(self, entry: StatementDraftEntry,
                        bank_contact_id: Optional[uuid.UUID] = None) -> Optional[Security]:
        if entry.contact_id is not None and entry.contact_id != bank_contact_id:
            return None
        if not self.securities:
            return None

        haystack = normalize_security_text(
            " ".join(part or '' for part in (entry.subject, entry.posting_description, entry.counterparty))
        )
        matches = [s for s in self.securities if _probe(s.identifier, haystack) or _probe(s.name, haystack)]

        if not matches:
            entry.set_security(None)
            return None
        entry.set_security(matches[0].id)
        if len(matches) > 1:
            logger.debug("Entry matches several securities", entry_id=str(entry.id), matches=len(matches))
            entry.mark_needs_check()
        return matches[0]


def _probe(value: Optional[str], haystack: str) -> bool:
    needle = normalize_security_text(value)
    return bool(needle) and needle in haystack

"""
Continuation line handling for table sections.

Some statements spread one movement over several lines: a first line with
date and amount, followed by lines carrying the counterparty or the purpose.
The strategy holds the last complete record on the session and folds the
additional rules of the section onto it until the next record starts.
"""
from typing import Callable, Optional

from ..common.models import StatementMovement
from .config.template import VariableMode
from .extraction import apply_rule

ParseFn = Callable[[str], Optional[StatementMovement]]


class ContinuationLineStrategy:
    """
    Args:
        require_amount: A new record also needs a non-zero amount; lines
            with a date but without an amount are continuation lines.
    """

    def __init__(self, require_amount: bool = False):
        self.require_amount = require_amount

    def is_complete(self, record: Optional[StatementMovement]) -> bool:
        if record is None or record.booking_date is None:
            return False
        return not (self.require_amount and record.amount == 0)

    def try_fold(self, session, line: str, parse: ParseFn) -> Optional[StatementMovement]:
        """
        Feeds one table line.

        Returns:
            A finished record, or None while the record is still open.
        """
        if session.held is None:
            record = parse(line)
            if record is None or record.is_error or record.booking_date is None:
                return record
            session.held = record
            session.fold_count = 0
            return None

        candidate = parse(line)
        if candidate is not None and candidate.is_error:
            return candidate
        if self.is_complete(candidate):
            finished = session.release_held()
            session.held = candidate
            return finished

        if session.section.ignores(line):
            return None

        for rule in session.section.rules:
            if rule.is_primary:
                continue
            if not apply_rule(rule, session.template, line, session.header, session.held, VariableMode.ALWAYS):
                continue
            session.fold_count += 1
            if rule.max_occurrence and session.fold_count >= rule.max_occurrence:
                return session.release_held()
        return None

    def on_section_end(self, session) -> Optional[StatementMovement]:
        return session.release_held()

"""
Template Engine

Line-oriented state machine that walks a statement through the sections of
a template and emits movement candidates.

All mutable state of one parse attempt lives on a ParseSession; the engine
itself keeps none, so attempts are isolated from each other.
"""
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Set

from ..common.logging_config import get_logger
from ..common.models import StatementHeader, StatementMovement, StatementParseResult
from .config.template import Section, SectionKind, StatementTemplate
from .exceptions import StatementImportError
from .extraction import apply_rule, apply_variable, walk_fields

logger = get_logger(__name__)


class ParseMode(Enum):
    NONE = 'none'
    IGNORE = 'ignore'
    KEY_VALUE = 'keyvalue'
    TABLE = 'table'
    TABLE_HEADER = 'table_header'
    DYNAMIC_TABLE = 'dyn_table'


@dataclass
class ParseSession:
    """
    State of one template attempt over one line sequence.
    """
    template: StatementTemplate
    today: date
    header: StatementHeader = field(default_factory=StatementHeader)
    section_index: int = -1
    section: Optional[Section] = None
    mode: ParseMode = ParseMode.NONE
    exhausted: bool = False
    held: Optional[StatementMovement] = None
    fold_count: int = 0
    seen: Set[tuple] = field(default_factory=set)
    line_no: int = 0

    def release_held(self) -> Optional[StatementMovement]:
        record = self.held
        self.held = None
        self.fold_count = 0
        return record


def _is_blank(line: str) -> bool:
    return not line.strip()


def _dedup_key(record: StatementMovement) -> tuple:
    return (record.booking_date, record.valuta_date, record.amount,
            record.subject, record.counterparty, record.posting_description)


class TemplateEngine:
    """
    Parses line sequences with an ordered list of templates.

    The first template that yields at least one movement wins. A template
    that raises a field/parse error is skipped like one that found nothing.
    """

    def __init__(self, templates: Sequence[StatementTemplate], reconciler=None, today: Optional[date] = None):
        """
        Args:
            templates: Templates in the order they should be tried
            reconciler: Optional strategy folding continuation lines into
                the preceding record (see reconciliation.py)
            today: Reference date for preview detection (defaults to today)
        """
        self.templates = list(templates)
        self.reconciler = reconciler
        self.today = today

    def parse(self, lines: Iterable[str]) -> Optional[StatementParseResult]:
        """
        Returns:
            The result of the first template producing movements, or None
            when no template matched.
        """
        lines = list(lines)
        for template in self.templates:
            try:
                result = self.run(template, lines)
            except StatementImportError as e:
                logger.debug(f"Template {template.name} aborted: {e}", template=template.name,
                             error_type=type(e).__name__)
                continue

            if result.movements:
                logger.info(f"Template matched: {template.name}", template=template.name,
                            movements=len(result.movements))
                return result
            logger.debug(f"Template {template.name} produced no movements", template=template.name)
        return None

    def new_session(self, template: StatementTemplate) -> ParseSession:
        return ParseSession(template=template, today=self.today or date.today())

    def run(self, template: StatementTemplate, lines: Iterable[str]) -> StatementParseResult:
        """Single attempt with one template. Parse errors propagate."""
        session = self.new_session(template)
        movements: List[StatementMovement] = []
        for line in lines:
            movements.extend(self.feed(session, line))
        movements.extend(self.finish(session))
        return StatementParseResult(header=session.header, movements=movements)

    def feed(self, session: ParseSession, line: str) -> List[StatementMovement]:
        """Advances the state machine by one line."""
        session.line_no += 1
        line = line.rstrip('\r\n')
        out: List[StatementMovement] = []

        while True:
            mode = session.mode

            if mode == ParseMode.NONE:
                self._next_section(session)
                continue

            if mode == ParseMode.IGNORE:
                if session.exhausted:
                    break
                if _is_blank(line):
                    session.mode = ParseMode.NONE
                    break
                if session.section.ends_at(line):
                    # the keyword line belongs to the next section
                    session.mode = ParseMode.NONE
                    continue
                break

            if mode == ParseMode.KEY_VALUE:
                if _is_blank(line) or session.section.ends_at(line):
                    session.mode = ParseMode.NONE
                else:
                    self._parse_key_value(session, line)
                break

            if mode == ParseMode.TABLE_HEADER:
                session.mode = ParseMode.TABLE
                break

            if mode == ParseMode.TABLE:
                if _is_blank(line):
                    out.extend(self._end_section(session))
                    break
                if session.section.ends_at(line):
                    out.extend(self._end_section(session))
                    continue
                record = self._table_line(session, line)
                if record is not None and record.is_error:
                    logger.debug("Table aborted on unparsable line", section=session.section.name,
                                 line_no=session.line_no)
                    out.extend(self._end_section(session))
                    continue
                out.extend(self._emit(session, record))
                break

            if mode == ParseMode.DYNAMIC_TABLE:
                if session.section.ends_at(line):
                    out.extend(self._end_section(session))
                    continue
                out.extend(self._emit(session, self._dynamic_line(session, line)))
                break

        return out

    def finish(self, session: ParseSession) -> List[StatementMovement]:
        """Flushes a record still held by the reconciler at end of input."""
        out = []
        if session.mode in (ParseMode.TABLE, ParseMode.DYNAMIC_TABLE):
            out = self._end_section(session)
        session.mode = ParseMode.NONE
        return out

    def parse_record(self, session: ParseSession, line: str) -> Optional[StatementMovement]:
        """
        Parses one table line into a record.

        Positional fields and primary rules are applied first. Additional
        rules run on the same line only after a primary match and only
        when no reconciler takes care of continuation lines.

        Returns:
            The record, None when the line is ignored or yields nothing,
            or an error record when the section stops on errors.
        """
        section = session.section
        if section.ignores(line):
            return None

        template = session.template
        record = StatementMovement()
        try:
            walk_fields(section, template, line, session.header, record)
            matched = False
            for rule in section.rules:
                if rule.is_primary:
                    matched = apply_rule(rule, template, line, session.header, record) or matched
            if matched and self.reconciler is None:
                for rule in section.rules:
                    if not rule.is_primary:
                        apply_rule(rule, template, line, session.header, record)
        except StatementImportError as e:
            if section.stop_on_error:
                logger.debug(f"Unparsable table line: {e}", section=section.name, line_no=session.line_no)
                return StatementMovement(is_error=True)
            raise

        return self._finish_record(session, record)

    def _finish_record(self, session: ParseSession, record: StatementMovement) -> Optional[StatementMovement]:
        if not record.is_set():
            return None
        record.is_preview = record.booking_date is None or record.booking_date > session.today
        return record

    def _next_section(self, session: ParseSession) -> None:
        sections = session.template.sections
        session.section_index += 1
        session.seen = set()
        if session.section_index >= len(sections):
            session.section = None
            session.exhausted = True
            session.mode = ParseMode.IGNORE
            return

        section = sections[session.section_index]
        session.section = section
        if section.kind == SectionKind.IGNORE:
            session.mode = ParseMode.IGNORE
        elif section.kind == SectionKind.KEY_VALUE:
            session.mode = ParseMode.KEY_VALUE
        elif section.kind == SectionKind.TABLE:
            session.mode = ParseMode.TABLE_HEADER if section.contains_header else ParseMode.TABLE
        else:
            session.mode = ParseMode.DYNAMIC_TABLE

    def _end_section(self, session: ParseSession) -> List[StatementMovement]:
        footer = None
        if self.reconciler is not None:
            footer = self.reconciler.on_section_end(session)
        records = self._emit(session, footer)
        session.mode = ParseMode.NONE
        return records

    def _emit(self, session: ParseSession, record: Optional[StatementMovement]) -> List[StatementMovement]:
        if record is None:
            return []
        if session.section is not None and session.section.remove_duplicates:
            key = _dedup_key(record)
            if key in session.seen:
                logger.debug("Duplicate record dropped", section=session.section.name, line_no=session.line_no)
                return []
            session.seen.add(key)
        return [record]

    def _table_line(self, session: ParseSession, line: str) -> Optional[StatementMovement]:
        if self.reconciler is not None:
            return self.reconciler.try_fold(session, line, lambda l: self.parse_record(session, l))
        return self.parse_record(session, line)

    def _dynamic_line(self, session: ParseSession, line: str) -> Optional[StatementMovement]:
        section = session.section
        if section.record_length and len(line) != section.record_length:
            return None
        try:
            record = self.parse_record(session, line)
        except StatementImportError as e:
            logger.debug(f"Skipping dynamic table line: {e}", section=section.name, line_no=session.line_no)
            return None
        if record is not None and record.is_error:
            return None
        return record

    def _parse_key_value(self, session: ParseSession, line: str) -> None:
        section = session.section
        separator = section.separator
        values = line.split(separator)
        for key in section.keys:
            if not key.variable:
                continue
            count = len(key.name.split(separator))
            label = separator.join(values[:count])
            if not label.endswith(key.name) or count >= len(values):
                continue
            apply_variable(session.template, session.header, None, key.variable,
                           separator.join(values[count:]), key.mode)

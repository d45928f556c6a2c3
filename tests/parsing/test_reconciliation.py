from datetime import date
from decimal import Decimal

import pytest

from statement_import.parsing.config.registry import parse_template
from statement_import.parsing.engine import TemplateEngine
from statement_import.parsing.reconciliation import ContinuationLineStrategy
from statement_import.common.models import StatementMovement

TODAY = date(2024, 12, 31)


def multiline_template(max_occurrence=3, **section_options):
    section = {
        "name": "rows",
        "type": "table",
        "field_separator": "#None#",
        "end_keywords": ["Neuer Saldo"],
        "columns": [
            {"pattern": r"^(?P<PostingDate>\d{2}\.\d{2}\.\d{4})\s+(?P<PostingDescription>\S+)(?:\s+(?P<Amount>-?[\d.]+,\d{2}))?$"},
            {"pattern": r"^\s+(?P<SourceName>.+)$", "role": "additional", "max_occurrence": max_occurrence},
        ],
    }
    section.update(section_options)
    return parse_template({
        "name": "Multiline",
        "source": "test_multiline",
        "sections": [section, {"name": "BlockEnd", "type": "ignore"}],
    })


@pytest.fixture
def engine():
    return TemplateEngine([multiline_template()], reconciler=ContinuationLineStrategy(), today=TODAY)


class TestContinuationLines:

    def test_record_completes_when_next_record_starts(self, engine):
        session = engine.new_session(engine.templates[0])

        emitted = []
        for line in ["01.03.2024 Lastschrift -12,00", "  Stadtwerke", "  Abschlag Maerz"]:
            emitted.extend(engine.feed(session, line))
        assert emitted == []

        emitted = engine.feed(session, "02.03.2024 Gutschrift 100,00")

        assert len(emitted) == 1
        assert emitted[0].counterparty == "Stadtwerke Abschlag Maerz"
        assert session.held.booking_date == date(2024, 3, 2)

    def test_max_occurrence_releases_record(self):
        engine = TemplateEngine([multiline_template(max_occurrence=2)],
                                reconciler=ContinuationLineStrategy(), today=TODAY)
        session = engine.new_session(engine.templates[0])

        assert engine.feed(session, "01.03.2024 Lastschrift -12,00") == []
        assert engine.feed(session, "  Stadtwerke") == []
        released = engine.feed(session, "  Abschlag")

        assert len(released) == 1
        assert released[0].counterparty == "Stadtwerke Abschlag"
        assert session.held is None

    def test_held_record_flushed_at_section_end(self, engine):
        lines = ["01.03.2024 Lastschrift -12,00", "  Stadtwerke", "Neuer Saldo 88,00", "01.04.2024 Ignoriert 1,00"]

        movements = engine.parse(lines).movements

        assert len(movements) == 1
        assert movements[0].counterparty == "Stadtwerke"

    def test_held_record_flushed_at_end_of_input(self, engine):
        movements = engine.parse(["01.03.2024 Lastschrift -12,00", "  Stadtwerke"]).movements

        assert len(movements) == 1
        assert movements[0].amount == Decimal("-12.00")

    def test_continuation_lines_do_not_fold_on_same_line(self, engine):
        movement = engine.parse(["01.03.2024 Lastschrift -12,00"]).movements[0]
        assert movement.counterparty is None

    def test_orphan_continuation_line_is_dropped(self, engine):
        lines = ["  Vortrag", "01.03.2024 Lastschrift -12,00"]

        movements = engine.parse(lines).movements

        assert len(movements) == 1
        assert movements[0].counterparty is None


class TestRequireAmount:

    def test_line_without_amount_continues_record(self):
        strategy = ContinuationLineStrategy(require_amount=True)
        engine = TemplateEngine([multiline_template()], reconciler=strategy, today=TODAY)

        movements = engine.parse([
            "01.03.2024 Lastschrift -12,00",
            "01.03.2024 Valuta",
            "02.03.2024 Gutschrift 5,00",
        ]).movements

        assert [m.amount for m in movements] == [Decimal("-12.00"), Decimal("5.00")]

    def test_without_require_amount_dated_line_starts_record(self, engine):
        movements = engine.parse([
            "01.03.2024 Lastschrift -12,00",
            "01.03.2024 Valuta",
        ]).movements

        assert len(movements) == 2

    def test_is_complete(self):
        strategy = ContinuationLineStrategy(require_amount=True)

        assert not strategy.is_complete(None)
        assert not strategy.is_complete(StatementMovement(amount=Decimal("1")))
        assert not strategy.is_complete(StatementMovement(booking_date=date(2024, 1, 1)))
        assert strategy.is_complete(StatementMovement(booking_date=date(2024, 1, 1), amount=Decimal("1")))

from datetime import date
from decimal import Decimal

import pytest

from statement_import.common.models import StatementHeader, StatementMovement
from statement_import.parsing.config.registry import parse_section, parse_template
from statement_import.parsing.config.template import VariableMode
from statement_import.parsing.exceptions import FieldParseError, MissingFieldError
from statement_import.parsing.extraction import apply_variable, parse_amount, parse_date, walk_fields


@pytest.fixture
def template():
    return parse_template({
        "name": "T",
        "sections": [{"type": "ignore"}],
        "replacements": [{"from": "Lastschr.", "to": "Lastschrift"}],
    })


class TestParseAmount:

    @pytest.mark.parametrize("text,expected", [
        ("1.234,56", Decimal("1234.56")),
        ("-50,00", Decimal("-50.00")),
        ("- 12,50", Decimal("-12.50")),
        ("12,50-", Decimal("-12.50")),
        ("12,50+", Decimal("12.50")),
        ("+3,00", Decimal("3.00")),
        ("1\xa0000,00", Decimal("1000.00")),
    ])
    def test_german_notation(self, template, text, expected):
        assert parse_amount(text, template) == expected

    @pytest.mark.parametrize("text", ["", "abc", "12,5x", "-"])
    def test_invalid(self, template, text):
        with pytest.raises(FieldParseError):
            parse_amount(text, template)

    def test_point_notation(self):
        template = parse_template({
            "name": "US",
            "sections": [{"type": "ignore"}],
            "decimal_separator": ".",
            "thousands_separator": ",",
        })
        assert parse_amount("1,234.56", template) == Decimal("1234.56")


class TestParseDate:

    def test_formats_tried_in_order(self, template):
        assert parse_date("01.03.2024", template) == date(2024, 3, 1)
        assert parse_date("01.03.24", template) == date(2024, 3, 1)
        assert parse_date(" 2024-03-01 ", template) == date(2024, 3, 1)

    def test_invalid_date_names_variable(self, template):
        with pytest.raises(FieldParseError) as exc:
            parse_date("32.13.2024", template, "ValutaDate")
        assert exc.value.variable == "ValutaDate"


class TestApplyVariable:

    def test_source_name_accumulates(self, template):
        record = StatementMovement()
        header = StatementHeader()

        apply_variable(template, header, record, "SourceName", "Stadtwerke ")
        apply_variable(template, header, record, "SourceName", " Musterstadt")

        assert record.counterparty == "Stadtwerke Musterstadt"

    def test_only_when_empty_keeps_value(self, template):
        record = StatementMovement(subject="Miete")
        apply_variable(template, StatementHeader(), record, "Description", "Andere", VariableMode.ONLY_WHEN_EMPTY)
        assert record.subject == "Miete"

    def test_header_variables(self, template):
        header = StatementHeader()

        apply_variable(template, header, None, "BankAccountNo", "54 1234 5678")
        apply_variable(template, header, None, "PeriodStart", "01.02.2024")

        assert header.account_number == "5412345678"
        assert header.period_start == date(2024, 2, 1)

    def test_record_variable_without_record_is_ignored(self, template):
        assert apply_variable(template, StatementHeader(), None, "Amount", "1,00") is False

    def test_unknown_variable(self, template):
        assert apply_variable(template, StatementHeader(), StatementMovement(), "Kategorie", "x") is False

    def test_replacement_on_posting_description(self, template):
        record = StatementMovement()
        apply_variable(template, StatementHeader(), record, "PostingDescription", "Lastschr.")
        assert record.posting_description == "Lastschrift"

    def test_amount_multiplier(self, template):
        record = StatementMovement()
        apply_variable(template, StatementHeader(), record, "Amount", "10,00", multiplier=-1)
        assert record.amount == Decimal("-10.00")


class TestWalkFields:

    def test_fixed_width(self, template):
        section = parse_section({
            "type": "table",
            "field_separator": "#None#",
            "columns": [
                {"name": "Datum", "variable": "PostingDate", "length": 11},
                {"name": "Text", "variable": "Description", "length": 8},
                {"name": "Betrag", "variable": "Amount"},
            ],
        })
        record = StatementMovement()

        walk_fields(section, template, "01.03.2024 Miete     -700,00", StatementHeader(), record)

        assert record.booking_date == date(2024, 3, 1)
        assert record.subject == "Miete"
        assert record.amount == Decimal("-700.00")

    def test_fixed_width_line_too_short(self, template):
        section = parse_section({
            "type": "table",
            "field_separator": "#None#",
            "columns": [{"name": "Datum", "variable": "PostingDate", "length": 11}, {"name": "Betrag"}],
        })
        with pytest.raises(MissingFieldError):
            walk_fields(section, template, "01.03.24", StatementHeader(), StatementMovement())

    def test_unmapped_columns_are_skipped(self, template):
        section = parse_section({
            "type": "table",
            "columns": [{"name": "Kategorie"}, {"name": "Betrag", "variable": "Amount"}],
        })
        record = StatementMovement()

        walk_fields(section, template, "Wohnen;-700,00", StatementHeader(), record)

        assert record.amount == Decimal("-700.00")

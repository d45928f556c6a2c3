from datetime import date
from decimal import Decimal

import pytest

from statement_import.parsing.banks.barclays import BarclaysPdfReader

TODAY = date(2024, 12, 31)


def card_line(booked, valuta, name, city, country, card, amount):
    return f"{booked:<11}{valuta:<11}{name:<23}{city:<14}{country:<3}{card:<15}{amount}"


CARD_STATEMENT = "\n".join([
    "BAWAG AG Niederlassung Deutschland",
    "Barclays Visa Kreditkarte",
    "Kreditkartenabrechnung vom 20.03.2024",
    "Hauptkarte/n",
    "Alter Saldo 120,00",
    card_line("15.03.2024", "16.03.2024", "AMAZON EU SARL", "LUXEMBOURG", "LU", "4567XXXX1234", "45,99-"),
    card_line("18.03.2024", "19.03.2024", "GUTSCHRIFT HAENDLER", "HAMBURG", "DE", "4567XXXX1234", "10,00+"),
    "Umsätze gesamt 35,99-",
    "Seite 1 von 1",
])

OVERVIEW_STATEMENT = "\n".join([
    "BAWAG AG Niederlassung Deutschland",
    "Ihre Umsatzübersicht",
    "Allgemeine Umsätze und Gebühren",
    "Lastschrift: Jahresgebühr 01.03.24 29,00- Kartenpreis 29,00",
    "Wie mit Ihnen vereinbart, buchen wir den Betrag ab.",
    "Umsatzübersicht",
    "Datum Valuta Beschreibung Betrag",
    "01.03.2024 02.03.2024 SPOTIFY STOCKHOLM Visa 9,99-",
    "Umsätze vom 01.03. bis 31.03.",
    "Seite 1 von 1",
])


@pytest.fixture
def reader(registry, settings):
    return BarclaysPdfReader(registry, settings, today=TODAY)


class TestBarclaysPdf:

    def test_identify(self, reader, patch_pdf, pdf_bytes):
        with patch_pdf([CARD_STATEMENT]):
            assert reader.identify("karte.pdf", pdf_bytes)

    def test_issuer_must_be_in_letterhead(self, reader, patch_pdf, pdf_bytes):
        text = "\n".join(["Kreditkarte"] * 10 + ["BAWAG AG"])
        with patch_pdf([text]):
            assert not reader.identify("karte.pdf", pdf_bytes)

    def test_fixed_width_card_table(self, reader, patch_pdf, pdf_bytes):
        with patch_pdf([CARD_STATEMENT]):
            result = reader.parse("karte.pdf", pdf_bytes)

        amazon, refund = result.movements
        assert amazon.booking_date == date(2024, 3, 15)
        assert amazon.valuta_date == date(2024, 3, 16)
        assert amazon.counterparty == "AMAZON EU SARL"
        assert amazon.amount == Decimal("-45.99")
        assert refund.amount == Decimal("10.00")
        assert result.header.description == "Barclays Import karte.pdf"

    def test_overview_layout(self, reader, patch_pdf, pdf_bytes):
        with patch_pdf([OVERVIEW_STATEMENT]):
            result = reader.parse("karte.pdf", pdf_bytes)

        fee, spotify = result.movements
        assert fee.booking_date == date(2024, 3, 1)
        assert fee.counterparty == "Jahresgebühr"
        assert fee.subject == "Kartenpreis"
        assert fee.amount == Decimal("-29.00")

        assert spotify.counterparty == "SPOTIFY STOCKHOLM"
        assert spotify.amount == Decimal("-9.99")

    def test_unparsable_card_line_aborts_layout(self, reader, patch_pdf, pdf_bytes):
        text = CARD_STATEMENT.replace("Umsätze gesamt 35,99-", "Zwischensumme")
        with patch_pdf([text]):
            assert reader.parse("karte.pdf", pdf_bytes) is None

    def test_overview_followed_by_card_rows(self, reader, patch_pdf, pdf_bytes):
        text = "\n".join([
            "BAWAG AG Niederlassung Deutschland",
            "Allgemeine Umsätze und Gebühren",
            "Lastschrift: Jahresgebühr 01.03.24 29,00- Kartenpreis 29,00",
            "Wie mit Ihnen vereinbart, buchen wir den Betrag ab.",
            "Umsatzübersicht",
            "01.03.2024 02.03.2024 SPOTIFY STOCKHOLM Visa 9,99-",
            "Umsätze vom 01.03. bis 31.03.",
            "Umsatzübersicht",
            card_line("15.03.2024", "16.03.2024", "AMAZON EU SARL", "LUXEMBOURG", "LU", "4567XXXX1234", "45,99-"),
            card_line("18.03.2024", "19.03.2024", "GUTSCHRIFT HAENDLER", "HAMBURG", "DE", "4567XXXX1234", "10,00+"),
            "Umsätze gesamt 35,99-",
        ])
        with patch_pdf([text]):
            result = reader.parse("karte.pdf", pdf_bytes)

        names = [m.counterparty for m in result.movements]
        assert names == ["Jahresgebühr", "SPOTIFY STOCKHOLM", "AMAZON EU SARL", "GUTSCHRIFT HAENDLER"]
        assert result.movements[2].amount == Decimal("-45.99")

"""
ING (ING-DiBa) statement readers.

- IngCsvReader: "Umsatzanzeige" CSV export (semicolon separated)
- IngPdfReader: account statement PDF, plus securities settlement
  documents (Wertpapierabrechnung / Dividendengutschrift) via parse_details()
"""
import re
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from ...common.logging_config import get_logger
from ...common.models import (
    SecurityTransactionType, StatementHeader, StatementMovement, StatementParseResult,
)
from ..base import PdfStatementReader, TextStatementReader
from ..reconciliation import ContinuationLineStrategy

logger = get_logger(__name__)

BANK_MARKER = "ING-DiBa AG"


def _first_content_line(lines: List[str]) -> str:
    for line in lines:
        if line.strip():
            return line.strip()
    return ''


class IngCsvReader(TextStatementReader):
    source_kind = 'ing_csv'
    bank_name = 'ING'

    def recognizes(self, lines: List[str]) -> bool:
        return _first_content_line(lines).startswith(BANK_MARKER)


# Securities settlement patterns (case-insensitive, whole trimmed line)
_FLAGS = re.IGNORECASE
RX_ISIN = re.compile(r"^ISIN\s*\(WKN\)\s*(?P<isin>[A-Z0-9]{10,12})(?:\s*\([A-Z0-9]+\))?", _FLAGS)
RX_NAME = re.compile(r"^Wertpapierbezeichnung\s*(?P<name>.+)$", _FLAGS)
RX_NOMINAL = re.compile(r"^Nominale\s+(?:St(?:ü|ue)ck\s*)?(?P<num>[0-9.,]+)(?:\s*St(?:ü|ue)ck)?$", _FLAGS)
RX_TOTAL = re.compile(
    r"^(?:Gesamtbetrag|Endbetrag) zu Ihren\s+(?P<dir>Gunsten|Lasten)\s+(?P<cur>[A-Z]{3})\s+(?P<amt>[+\-]?\s*[0-9.,]+)$",
    _FLAGS,
)
RX_IBAN = re.compile(r"^Abrechnungs-IBAN\s+(?P<iban>[A-Z]{2}[0-9A-Z ]+)$", _FLAGS)
RX_PAYDAY = re.compile(r"^Zahltag\s+(?P<date>\d{2}\.\d{2}\.\d{4})$", _FLAGS)
RX_VALUTA = re.compile(r"^Valuta\s+(?P<date>\d{2}\.\d{2}\.\d{4})$", _FLAGS)
RX_DATE = re.compile(r"^Datum:\s+(?P<date>\d{2}\.\d{2}\.\d{4})$", _FLAGS)
RX_TAX = re.compile(
    r"^(?P<name>Kapitalertragsteuer|Solidarit[aä]tszuschlag|Kirchensteuer)\s+(?P<rate>\d{1,3},\d{2})%\s+"
    r"(?P<cur>[A-Z]{3})\s+(?P<amt>[+\-]?\s*[0-9.,]+)$",
    _FLAGS,
)
RX_COMMISSION = re.compile(r"^Provision\s+(?P<cur>[A-Z]{3})\s+(?P<amt>[+\-]?\s*[0-9.,]+)$", _FLAGS)
RX_SELL = re.compile(r"^Wertpapierabrechnung\s+Verkauf(\s+aus\s+Kapitalmaßnahme)?$", _FLAGS)
RX_BUY = re.compile(r"^Wertpapierabrechnung\s+Kauf(\s+aus\s+Sparplan)?$", _FLAGS)
RX_ORDER = re.compile(r"^Ordernummer\s+(?P<orderno>[0-9.]+)$", _FLAGS)

DIVIDEND_MARKERS = ('dividendengutschrift', 'ertragsgutschrift')

TAX_LABELS = {
    'kapitalertragsteuer': 'KESt',
    'solidar': 'SolZ',
    'kirchen': 'KiSt',
}


def _de_decimal(text: str) -> Optional[Decimal]:
    cleaned = text.replace(' ', '').replace('.', '').replace(',', '.')
    try:
        return Decimal(cleaned)
    except InvalidOperation:
        return None


def _de_date(text: str):
    return datetime.strptime(text, '%d.%m.%Y').date()


def _de_format(value: Decimal) -> str:
    return str(value).replace('.', ',')


def parse_settlement(lines: List[str], file_name: str) -> Optional[StatementParseResult]:
    """
    Reads an ING securities settlement (buy, sell, dividend) into a single
    movement with quantity, taxes and commission.

    Returns:
        StatementParseResult with one movement, or None when the document
        carries no total amount.
    """
    tx_type = None
    posting_description = None
    isin = name = order_no = iban = None
    quantity = amount = None
    currency = None
    booking_date = valuta_date = None
    taxes = {}
    tax_currency = None
    commission = None

    try:
        for raw in lines:
            line = raw.strip()
            if not line:
                continue

            if tx_type != SecurityTransactionType.DIVIDEND and any(m in line.lower() for m in DIVIDEND_MARKERS):
                tx_type = SecurityTransactionType.DIVIDEND
                posting_description = 'Dividendengutschrift'
                continue
            if RX_SELL.match(line):
                tx_type = SecurityTransactionType.SELL
                continue
            if RX_BUY.match(line):
                tx_type = SecurityTransactionType.BUY
                continue

            m = RX_ORDER.match(line)
            if m:
                order_no = m.group('orderno').replace(' ', '')
                continue
            m = RX_ISIN.match(line)
            if m:
                isin = m.group('isin').strip()
                continue
            m = RX_NAME.match(line)
            if m:
                name = m.group('name').strip()
                continue
            m = RX_NOMINAL.match(line)
            if m:
                quantity = _de_decimal(m.group('num')) or quantity
                continue
            m = RX_TOTAL.match(line)
            if m:
                currency = m.group('cur').strip()
                parsed = _de_decimal(m.group('amt'))
                if parsed is not None:
                    amount = -abs(parsed) if m.group('dir').lower() == 'lasten' else abs(parsed)
                continue
            m = RX_IBAN.match(line)
            if m:
                iban = re.sub(r"\s+", '', m.group('iban'))
                continue
            m = RX_PAYDAY.match(line)
            if m:
                # the first payday wins, a later "Datum:" line still overrides it
                if booking_date is None:
                    booking_date = _de_date(m.group('date'))
                continue
            m = RX_DATE.match(line)
            if m:
                booking_date = _de_date(m.group('date'))
                continue
            m = RX_VALUTA.match(line)
            if m:
                valuta_date = _de_date(m.group('date'))
                continue
            m = RX_TAX.match(line)
            if m:
                tax_currency = tax_currency or m.group('cur').strip()
                parsed = _de_decimal(m.group('amt'))
                if parsed is not None:
                    tax_name = m.group('name').lower()
                    for prefix, label in TAX_LABELS.items():
                        if tax_name.startswith(prefix):
                            taxes[label] = parsed
                continue
            m = RX_COMMISSION.match(line)
            if m:
                parsed = _de_decimal(m.group('amt'))
                if parsed is not None:
                    commission = parsed
                continue
    except ValueError as e:
        logger.warning(f"Unreadable settlement {file_name}: {e}", file_name=file_name)
        return None

    if amount is None:
        logger.debug(f"No settlement total found in {file_name}", file_name=file_name)
        return None

    subject_parts = []
    if tx_type is not None:
        subject_parts.append(tx_type.value)
    if isin:
        subject_parts.append(isin)
    if name:
        subject_parts.append(name)
    if order_no:
        subject_parts.append(f"Order {order_no}")

    fee_items = [f"{label} {_de_format(taxes[label])} {tax_currency or currency or 'EUR'}"
                 for label in ('KESt', 'SolZ', 'KiSt') if label in taxes]
    if commission is not None:
        fee_items.append(f"Prov {_de_format(commission)} {currency or 'EUR'}")
    if fee_items:
        subject_parts.append("Steuern/Gebühren: " + "; ".join(fee_items))

    tax_total = sum(taxes.values(), Decimal('0'))
    movement = StatementMovement(
        booking_date=booking_date,
        valuta_date=valuta_date or booking_date,
        amount=amount,
        currency_code=currency or 'EUR',
        subject=" · ".join(subject_parts),
        posting_description=tx_type.value if tx_type is not None else posting_description,
        quantity=quantity,
        tax_amount=tax_total if tax_total != 0 else None,
        fee_amount=commission,
        security_transaction_type=tx_type,
    )
    header = StatementHeader(
        account_number=iban or '',
        iban=iban,
        description=f"ING PDF Import {file_name}",
    )
    return StatementParseResult(header=header, movements=[movement])


class IngPdfReader(PdfStatementReader):
    """
    ING account statements: a movement starts with a booking line (date,
    posting text, counterparty, amount) and continues with a valuta line
    carrying the purpose.
    """
    source_kind = 'ing_pdf'
    bank_name = 'ING'

    def recognizes(self, lines: List[str]) -> bool:
        return _first_content_line(lines).startswith(BANK_MARKER)

    def reconciler(self):
        return ContinuationLineStrategy(require_amount=True)

    def parse_details(self, file_name: str, data: bytes) -> Optional[StatementParseResult]:
        return parse_settlement(self.read_lines(data), file_name)

"""
Field and pattern extraction for table lines.

Values are converted with the template's locale (decimal comma,
day.month.year by default) and assigned either to the statement header or
to the record being built.
"""
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from ..common.models import StatementHeader, StatementMovement
from .config.template import RegexRule, Section, StatementTemplate, VariableMode
from .exceptions import FieldParseError, MissingFieldError

HEADER_VARIABLES = {
    'BankAccountNo': 'account_number',
    'IBAN': 'iban',
    'BankCode': 'bank_code',
    'AccountHolder': 'account_holder',
    'PeriodStart': 'period_start',
    'PeriodEnd': 'period_end',
    'StatementDescription': 'description',
}


def parse_date(value: str, template: StatementTemplate, variable: str = 'PostingDate') -> date:
    text = (value or '').strip()
    for fmt in template.date_formats:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise FieldParseError(variable, value, f"expected one of {', '.join(template.date_formats)}")


def parse_amount(value: str, template: StatementTemplate, variable: str = 'Amount') -> Decimal:
    """
    Parses an amount in the template notation.

    Examples (decimal comma):
        "1.234,56"  -> Decimal("1234.56")
        "- 12,50"   -> Decimal("-12.50")
        "12,50-"    -> Decimal("-12.50")
    """
    text = (value or '').replace(' ', '').replace('\xa0', '').strip()
    sign = 1
    if text[-1:] in ('-', '+'):
        sign = -1 if text[-1] == '-' else 1
        text = text[:-1]
    if text[:1] in ('-', '+'):
        sign = -sign if text[0] == '-' else sign
        text = text[1:]

    if template.thousands_separator:
        text = text.replace(template.thousands_separator, '')
    text = text.replace(template.decimal_separator, '.')

    if not text or not all(c.isdigit() or c == '.' for c in text):
        raise FieldParseError(variable, value)
    try:
        return Decimal(text) * sign
    except InvalidOperation:
        raise FieldParseError(variable, value)


def _assign(target, attr: str, value, mode: VariableMode):
    if mode == VariableMode.ONLY_WHEN_EMPTY and getattr(target, attr) not in (None, ''):
        return
    setattr(target, attr, value)


def apply_variable(template: StatementTemplate, header: StatementHeader, record: StatementMovement,
                   name: str, value: str, mode: VariableMode = VariableMode.ALWAYS, multiplier: int = 1) -> bool:
    """
    Assigns one parsed value to its target.

    Returns:
        True when the variable is known, False when it was ignored.

    Raises:
        FieldParseError: Date, amount or quantity value cannot be parsed
    """
    if value is None:
        return False

    if name in HEADER_VARIABLES:
        attr = HEADER_VARIABLES[name]
        if attr in ('period_start', 'period_end'):
            parsed = parse_date(value, template, name)
        elif attr in ('account_number', 'iban'):
            parsed = value.replace(' ', '').strip()
        else:
            parsed = value.strip()
        _assign(header, attr, parsed, mode)
        return True

    if record is None:
        return False

    if name == 'PostingDate':
        _assign(record, 'booking_date', parse_date(value, template, name), mode)
    elif name == 'ValutaDate':
        _assign(record, 'valuta_date', parse_date(value, template, name), mode)
    elif name == 'SourceName':
        joined = f"{record.counterparty or ''} {value.strip()}".strip()
        record.counterparty = template.apply_replacements(joined)
    elif name == 'PostingDescription':
        _assign(record, 'posting_description', template.apply_replacements(value.strip()), mode)
    elif name == 'Description':
        _assign(record, 'subject', template.apply_replacements(value.strip()), mode)
    elif name == 'CurrencyCode':
        _assign(record, 'currency_code', value.strip(), mode)
    elif name == 'Amount':
        amount = parse_amount(value, template, name) * multiplier
        if mode == VariableMode.ALWAYS or record.amount == 0:
            record.amount = amount
    elif name == 'Quantity':
        _assign(record, 'quantity', parse_amount(value, template, name), mode)
    else:
        return False
    return True


def walk_fields(section: Section, template: StatementTemplate, line: str,
                header: StatementHeader, record: StatementMovement) -> None:
    """
    Consumes the section's positional fields from a line.

    With the '#None#' separator every field takes `length` characters of
    what is left of the line (the rest when length is 0). Otherwise the line
    is split on the separator and fields take one column each.

    Raises:
        MissingFieldError: The line is too short / has too few columns
        FieldParseError: A value cannot be converted
    """
    fields = section.fields
    if not fields:
        return

    if section.is_fixed_width:
        remaining = line
        for fd in fields:
            length = fd.length or len(remaining)
            if length > len(remaining):
                raise MissingFieldError(
                    f"Field {fd.name!r} needs {length} characters, {len(remaining)} left"
                )
            value, remaining = remaining[:length], remaining[length:]
            if fd.variable:
                apply_variable(template, header, record, fd.variable, value, VariableMode.ALWAYS, fd.multiplier)
        return

    values = line.split(section.field_separator)
    for idx, fd in enumerate(fields):
        if idx >= len(values):
            raise MissingFieldError(f"Field {fd.name!r} missing: line has {len(values)} columns")
        if fd.variable:
            apply_variable(template, header, record, fd.variable, values[idx], VariableMode.ALWAYS, fd.multiplier)


def apply_rule(rule: RegexRule, template: StatementTemplate, line: str,
               header: StatementHeader, record: StatementMovement,
               mode: VariableMode = VariableMode.ALWAYS) -> bool:
    """
    Runs one regex rule against a line and assigns every non-empty named group.

    Returns:
        True when the pattern matched
    """
    match = rule.pattern.search(line)
    if not match:
        return False
    for group_name, value in match.groupdict().items():
        if not value:
            continue
        apply_variable(template, header, record, group_name, value, mode, rule.multiplier)
    return True

"""
Exceptions raised while loading templates and parsing statements.
"""


class StatementImportError(Exception):
    """Base class for all statement import errors."""


class TemplateConfigurationError(StatementImportError):
    """Raised when a template file is malformed (unknown section kind, mode, bad regex)."""


class FieldParseError(StatementImportError, ValueError):
    """
    Raised when a matched value cannot be converted (date, amount, quantity).
    """

    def __init__(self, variable: str, value: str, reason: str = None):
        self.variable = variable
        self.value = value
        message = f"Cannot parse {variable} from {value!r}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class MissingFieldError(StatementImportError, IndexError):
    """Raised when a table line has fewer columns (or characters) than the section expects."""


class UnrecognizedStatementFormat(StatementImportError):
    """
    Raised by the import facade, on request, when no reader or template
    produced any movement for a file.
    """

    def __init__(self, message: str, filename: str = None, source_kind: str = None, sample_text: str = None):
        self.filename = filename
        self.source_kind = source_kind
        self.sample_text = sample_text

        details = []
        if filename:
            details.append(f"File: {filename}")
        if source_kind:
            details.append(f"Source: {source_kind}")
        if sample_text:
            details.append(f"Sample: {sample_text[:200]}...")

        full_message = f"{message}\n" + "\n".join(details) if details else message
        super().__init__(full_message)

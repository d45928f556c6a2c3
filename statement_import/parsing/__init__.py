"""
Statement Parsing Module

Template-driven import of bank statement exports:
- Template definitions and registry (JSON)
- Section state machine and continuation line handling
- Text / PDF sources
- Bank readers (ING, Barclays, Wüstenrot)
- Import facade
"""

# Configuration
from .config.template import StatementTemplate, Section, SectionKind, VariableMode
from .config.registry import TemplateRegistry

# Engine
from .engine import TemplateEngine, ParseSession, ParseMode
from .reconciliation import ContinuationLineStrategy

# Readers
from .base import BaseStatementReader, TextStatementReader, PdfStatementReader
from .banks import READERS, IngCsvReader, IngPdfReader, BarclaysPdfReader, WuestenrotPdfReader

# Facade
from .facade import StatementImporter
from .exceptions import (
    StatementImportError, TemplateConfigurationError, FieldParseError,
    MissingFieldError, UnrecognizedStatementFormat,
)

__all__ = [
    # Config
    'StatementTemplate',
    'Section',
    'SectionKind',
    'VariableMode',
    'TemplateRegistry',
    # Engine
    'TemplateEngine',
    'ParseSession',
    'ParseMode',
    'ContinuationLineStrategy',
    # Readers
    'BaseStatementReader',
    'TextStatementReader',
    'PdfStatementReader',
    'READERS',
    'IngCsvReader',
    'IngPdfReader',
    'BarclaysPdfReader',
    'WuestenrotPdfReader',
    # Facade
    'StatementImporter',
    # Errors
    'StatementImportError',
    'TemplateConfigurationError',
    'FieldParseError',
    'MissingFieldError',
    'UnrecognizedStatementFormat',
]

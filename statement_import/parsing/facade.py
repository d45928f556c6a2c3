import pandas as pd
from typing import Dict, Optional, Tuple, Type

from ..common.logging_config import clear_import_id, get_import_id, get_logger, set_import_id, setup_logging
from ..common.models import StatementDraft, StatementParseResult
from ..common.settings import ImportSettings, load_settings
from .banks import READERS
from .base import BaseStatementReader
from .config.registry import TemplateRegistry
from .exceptions import UnrecognizedStatementFormat
from .sources.pdf import PdfTextSource

logger = get_logger(__name__)


class StatementImporter:
    """
    Entry point of the statement import: detects which bank export a file
    is, runs the matching reader and hands back movements, a DataFrame or a
    draft.
    """

    def __init__(self, settings: Optional[ImportSettings] = None, registry: Optional[TemplateRegistry] = None,
                 readers: Optional[Dict[str, Type[BaseStatementReader]]] = None, today=None,
                 configure_logging: bool = False):
        """
        Args:
            configure_logging: Set up JSON logging from settings.log_level and
                settings.log_file (for applications embedding the importer)
        """
        self.settings = settings or load_settings()
        if configure_logging:
            setup_logging(self.settings.log_level, self.settings.log_file)
        self.registry = registry or TemplateRegistry(self.settings.templates_dir)
        self.readers = {
            kind: reader_cls(self.registry, self.settings, today=today)
            for kind, reader_cls in (readers or READERS).items()
        }

    def detect_source(self, file_name: str, data: bytes) -> Optional[str]:
        """
        Returns:
            The source kind of the first reader recognizing the file, or None.
        """
        for kind, reader in self.readers.items():
            if reader.identify(file_name, data):
                logger.info(f"Detected {kind} for {file_name}", source_kind=kind, file_name=file_name)
                return kind
        logger.info(f"No reader recognized {file_name}", file_name=file_name, size=len(data or b''))
        return None

    def parse(self, file_name: str, data: bytes, source_kind: Optional[str] = None,
              details: bool = False, require: bool = False) -> Optional[StatementParseResult]:
        """
        Unified parse method. Dispatches to the reader of the detected (or
        given) source kind.

        Args:
            details: Use the reader's detail parser (securities settlements)
            require: Raise UnrecognizedStatementFormat instead of returning None

        Returns:
            StatementParseResult, or None when the file is not recognized
        """
        # a caller-bound import id is kept, otherwise every call gets its own
        owns_import_id = get_import_id() is None
        if owns_import_id:
            set_import_id()
        try:
            return self._parse(file_name, data, source_kind, details, require)
        finally:
            if owns_import_id:
                clear_import_id()

    def _parse(self, file_name, data, source_kind, details, require):
        if source_kind is None:
            source_kind = self.detect_source(file_name, data)
        elif source_kind not in self.readers:
            raise ValueError(f"Unknown source kind: {source_kind}")

        result = None
        if source_kind is not None:
            reader = self.readers[source_kind]
            result = reader.parse_details(file_name, data) if details else reader.parse(file_name, data)

        if result is None and require:
            raise UnrecognizedStatementFormat(
                "Statement format not recognized",
                filename=file_name,
                source_kind=source_kind,
                sample_text=self._sample_text(data),
            )
        return result

    def parse_to_frame(self, file_name: str, data: bytes, source_kind: Optional[str] = None,
                       details: bool = False) -> Tuple[pd.DataFrame, dict]:
        """
        Returns: (pd.DataFrame, dict) -> (movements, metadata)
        """
        if source_kind is None:
            source_kind = self.detect_source(file_name, data)
        result = self.parse(file_name, data, source_kind=source_kind, details=details) if source_kind else None
        if result is None:
            return pd.DataFrame(), {'source': source_kind, 'file_name': file_name}

        header = result.header
        metadata = {
            'source': source_kind,
            'bank': self.readers[source_kind].bank_name,
            'file_name': file_name,
            'account_number': header.account_number,
            'iban': header.iban,
            'account_holder': header.account_holder,
            'period_start': header.period_start,
            'period_end': header.period_end,
            'description': header.description,
        }
        df = result.to_dataframe()
        if not df.empty:
            df['booking_date'] = pd.to_datetime(df['booking_date']).dt.date
        return df, metadata

    def create_draft(self, file_name: str, data: bytes, source_kind: Optional[str] = None,
                     details: bool = False) -> Optional[StatementDraft]:
        result = self.parse(file_name, data, source_kind=source_kind, details=details)
        if result is None:
            return None
        return StatementDraft.from_parse_result(file_name, result)

    def _sample_text(self, data: bytes) -> str:
        if not data:
            return ''
        if PdfTextSource.is_pdf(data):
            return ''
        return data[:500].decode('utf-8', errors='replace')

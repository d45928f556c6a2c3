from .ing import IngCsvReader, IngPdfReader, parse_settlement
from .barclays import BarclaysPdfReader
from .wuestenrot import WuestenrotPdfReader

# detection order: text exports first, then the PDF layouts
READERS = {
    'ing_csv': IngCsvReader,
    'ing_pdf': IngPdfReader,
    'barclays_pdf': BarclaysPdfReader,
    'wuestenrot_pdf': WuestenrotPdfReader,
}

__all__ = [
    'IngCsvReader',
    'IngPdfReader',
    'BarclaysPdfReader',
    'WuestenrotPdfReader',
    'parse_settlement',
    'READERS',
]

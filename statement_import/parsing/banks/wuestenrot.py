from typing import List

from ..base import PdfStatementReader
from ..reconciliation import ContinuationLineStrategy

BANK_MARKER = "Wüstenrot"
MARKER_WINDOW = 20


class WuestenrotPdfReader(PdfStatementReader):
    """
    Wüstenrot building savings statements. The counterparty follows the
    booking line on up to two lines (see max_occurrence in the template).
    """
    source_kind = 'wuestenrot_pdf'
    bank_name = 'Wüstenrot'

    def recognizes(self, lines: List[str]) -> bool:
        return any(BANK_MARKER in line for line in lines[:MARKER_WINDOW])

    def reconciler(self):
        return ContinuationLineStrategy()

from typing import List

from ..base import PdfStatementReader

BANK_MARKER = "BAWAG AG"
# the issuer line sits in the letterhead
MARKER_WINDOW = 10


class BarclaysPdfReader(PdfStatementReader):
    """Barclays credit card statements (issued by BAWAG AG)."""
    source_kind = 'barclays_pdf'
    bank_name = 'Barclays'

    def recognizes(self, lines: List[str]) -> bool:
        return any(line.startswith(BANK_MARKER) for line in lines[:MARKER_WINDOW])

"""
Text Source

Decodes delimited exports (CSV) into lines.
"""
import codecs
import logging
from typing import List

logger = logging.getLogger(__name__)

_UTF16_BOMS = (codecs.BOM_UTF16_LE, codecs.BOM_UTF16_BE)


class TextSource:
    """
    Args:
        fallback_encoding: Used when the bytes are not valid UTF-8
            (older exports are written in cp1252)
    """

    def __init__(self, fallback_encoding: str = 'cp1252'):
        self.fallback_encoding = fallback_encoding

    @staticmethod
    def is_text(data: bytes) -> bool:
        """Non-empty, NUL-free and either BOM-marked or strict UTF-8."""
        if not data:
            return False
        if data.startswith(codecs.BOM_UTF8) or data.startswith(_UTF16_BOMS):
            return True
        if b'\x00' in data:
            return False
        try:
            data.decode('utf-8', errors='strict')
        except UnicodeDecodeError:
            return False
        return True

    def decode(self, data: bytes) -> str:
        if data.startswith(_UTF16_BOMS):
            return data.decode('utf-16')
        try:
            return data.decode('utf-8-sig')
        except UnicodeDecodeError:
            logger.debug(f"Content is not UTF-8, decoding as {self.fallback_encoding}")
            return data.decode(self.fallback_encoding, errors='replace')

    def read_lines(self, data: bytes) -> List[str]:
        """
        Lines of the decoded content. Lines are neither trimmed nor filtered;
        blank lines are significant to the section state machine.
        """
        content = self.decode(data).replace('\r\n', '\n').replace('\r', '\n')
        return content.split('\n')

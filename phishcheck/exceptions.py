"""
Error types raised outside the scoring core.

The core (`phishcheck.core.analyzer`) never raises for string input; every
failure below belongs to document intake.
"""
from typing import List, Optional


class PhishCheckError(Exception):
    """Base class for all PhishCheck errors"""


class SourceError(PhishCheckError):
    """A single input source could not be turned into text"""

    def __init__(self, source: str, detail: str):
        self.source = source
        self.detail = detail
        super().__init__(f"{source}: {detail}")

    @property
    def error(self) -> str:
        return type(self).__name__


class FileTooLarge(SourceError):
    def __init__(self, source: str, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(
            source,
            f"File is {size / (1024 * 1024):.1f} MB, limit is {limit / (1024 * 1024):g} MB"
        )


class UnsupportedFormat(SourceError):
    def __init__(self, source: str, file_type: str):
        self.file_type = file_type
        super().__init__(source, f"Unsupported format: {file_type or 'unknown'}")


class ExtractionError(SourceError):
    """Parsing or OCR failed for an otherwise supported file"""


class NoInputError(PhishCheckError):
    """Nothing left to analyze after all sources were processed"""

    def __init__(self, message: str = "Add at least one file or some text to analyze",
                 failures: Optional[List[SourceError]] = None):
        self.failures = failures or []
        super().__init__(message)

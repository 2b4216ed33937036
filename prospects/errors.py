"""
Exceptions raised by the resolution engine and its store adapters.

Business-logic non-matches are never exceptions; these cover
infrastructure failures only.
"""


class ResolutionError(Exception):
    """Base class for prospect resolution errors."""


class StoreError(ResolutionError):
    """A record store or job tracker call failed."""


class RecordNotFoundError(StoreError):
    """The referenced contact, company or job does not exist."""

    def __init__(self, kind: str, record_id: str):
        super().__init__(f"{kind} not found: {record_id}")
        self.kind = kind
        self.record_id = record_id

"""
Services layer: storage and coordination around the quote workflow.

``SqlQuoteStatusStore`` persists status changes through SQLAlchemy;
``QuoteStatusService`` runs a status change end to end.
"""

from quote_services.status_service import QuoteStatusService
from quote_services.status_store import QuoteStatusStore, SqlQuoteStatusStore

__all__ = [
    "QuoteStatusService",
    "QuoteStatusStore",
    "SqlQuoteStatusStore",
]

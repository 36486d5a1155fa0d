"""ORM models.  Importing this package registers every table on Base.metadata."""

from quote_kernel.models.activity import ActivityModel
from quote_kernel.models.quote import QuoteModel, QuoteStatusHistoryModel

__all__ = ["ActivityModel", "QuoteModel", "QuoteStatusHistoryModel"]

"""Documentation staleness."""

from primpact.docs.staleness import check_doc_staleness

__all__ = ["check_doc_staleness"]

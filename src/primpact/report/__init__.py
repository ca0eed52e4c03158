"""Report renderers."""

from primpact.report.formats import format_dot, format_json
from primpact.report.markdown import format_breaking_markdown, format_markdown

__all__ = ["format_breaking_markdown", "format_dot", "format_json", "format_markdown"]

"""Built-in chat command handlers."""

from fireflies.tools.builtin.calculator import CalculatorTool
from fireflies.tools.builtin.clear_context import ClearContextTool
from fireflies.tools.builtin.url_extract import ScrapeClient, UrlExtractTool
from fireflies.tools.builtin.web_search import SearchClient, SearchResult, WebSearchTool

__all__ = [
    "CalculatorTool",
    "ClearContextTool",
    "ScrapeClient",
    "SearchClient",
    "SearchResult",
    "UrlExtractTool",
    "WebSearchTool",
]

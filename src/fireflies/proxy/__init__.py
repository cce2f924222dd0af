"""Search, scrape and inference proxy.

Serves the single ``action``-dispatched endpoint that ``fireflies.llm.ProxyClient``
talks to.
"""

from fireflies.proxy.handlers import handle_action

__all__ = ["handle_action"]

"""LLM package for FireFlies."""

from fireflies.llm.client import ProxyClient, resolve_proxy_client

__all__ = ["ProxyClient", "resolve_proxy_client"]

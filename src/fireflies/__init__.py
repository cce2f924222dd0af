"""FireFlies - chat with local Ollama models, plus web search, page reading and a calculator."""

__version__ = "0.3.0"

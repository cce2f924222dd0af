"""FireFlies entry point.

Changes:
  - 2026-10-08: Added --check-ollama (lists models on the configured server and exits).
  - 2026-10-07: API server is the default mode; ``serve`` kept as an explicit alias.
  - 2026-10-02: Rich logging for console output.
"""

import argparse
import asyncio
import logging

from fireflies import __version__
from fireflies.config import Settings, get_settings
from fireflies.logging_setup import setup_logging

setup_logging(level="INFO")
logger = logging.getLogger(__name__)


async def check_ollama(settings: Settings) -> int:
    """Print the models available on the configured Ollama server."""
    from fireflies.proxy.ollama import list_models

    try:
        models = await list_models(settings.ollama_host)
    except Exception as e:
        logger.error("Ollama at %s is not reachable: %s", settings.ollama_host, e)
        return 1

    if not models:
        logger.warning("Ollama at %s has no models installed", settings.ollama_host)
        return 1

    names = [m.get("name", "?") for m in models]
    logger.info("Ollama at %s: %d model(s): %s", settings.ollama_host, len(names), ", ".join(names))
    if settings.default_model not in names:
        logger.warning("Default model %s is not installed", settings.default_model)
    return 0


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="🔥 FireFlies - chat with Ollama models, web search and page reading",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  fireflies                          Start the API server (default)
  fireflies serve --port 9000        Start the API server on port 9000
  fireflies --dev                    Start with auto-reload (dev mode)
  fireflies --check-ollama           List models on the configured Ollama server
""",
    )

    parser.add_argument(
        "command",
        nargs="?",
        choices=["serve"],
        help="Subcommand: 'serve' starts the API server (same as no subcommand)",
    )
    parser.add_argument(
        "--host",
        default=None,
        help="Host to bind the server (default: FIREFLIES_WEB_HOST or 127.0.0.1)",
    )
    parser.add_argument(
        "--port",
        "-p",
        type=int,
        default=None,
        help="Port for the server (default: FIREFLIES_WEB_PORT or 8000)",
    )
    parser.add_argument(
        "--dev",
        action="store_true",
        help="Development mode with auto-reload",
    )
    parser.add_argument(
        "--check-ollama",
        action="store_true",
        help="Check the Ollama server and exit",
    )
    parser.add_argument("--version", "-v", action="version", version=f"%(prog)s {__version__}")

    args = parser.parse_args()
    settings = get_settings()

    host = args.host or settings.web_host
    port = args.port or settings.web_port

    try:
        if args.check_ollama:
            raise SystemExit(asyncio.run(check_ollama(settings)))

        from fireflies.api.serve import run_api_server

        run_api_server(host=host, port=port, dev=args.dev)
    except KeyboardInterrupt:
        logger.info("👋 FireFlies stopped.")


if __name__ == "__main__":
    main()

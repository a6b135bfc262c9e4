"""Logging setup shared by the CLI and the bot runner."""

import logging

import logfire

logger = logging.getLogger(__name__)


def init_logging(level: str = "INFO") -> None:
    """Configure stdlib logging and forward records to logfire.

    Logfire only exports when a token is present, so this is safe to call
    in local runs.

    Args:
        level: Root log level name.
    """
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )
    logfire.configure(send_to_logfire="if-token-present", console=False)
    logging.getLogger().addHandler(logfire.LogfireLoggingHandler())
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def instrument_openai(client: object) -> None:
    """Attach logfire spans to an OpenAI client (best-effort)."""
    try:
        logfire.instrument_openai(client)
    except Exception:
        logger.debug("OpenAI instrumentation unavailable", exc_info=True)

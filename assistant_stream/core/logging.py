import logging


def configure_logging(log_level: str) -> None:
    """Configure process-wide logging for the assistant stream server and clients.

    The per-request httpx logger stays at WARNING unless running at DEBUG.
    """

    level = getattr(logging, log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logging.getLogger("httpx").setLevel(level if level <= logging.DEBUG else logging.WARNING)

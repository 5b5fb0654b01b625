from __future__ import annotations

import logging

# httpx logs every request at INFO; the ledger's own client logs them at DEBUG.
NOISY_LOGGERS = ("httpx", "httpcore")


def configure_logging(*, level: int = logging.INFO, force: bool = False) -> None:
    """Set up root logging for the CLI and the web service.

    Third-party request logging stays at WARNING unless ``level`` is DEBUG.
    """

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
    noisy_level = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(noisy_level)

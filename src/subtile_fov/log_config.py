"""Logging setup for Subtile FOV applications (demo, benchmarks)."""
import logging

import structlog


def configure_logging(level: int = logging.INFO, colors: bool = True):
    """Configures structlog to render key/value events to the console."""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="%H:%M:%S", utc=False),
            structlog.dev.ConsoleRenderer(colors=colors),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )


def test_configure_logging(capsys):
    configure_logging(logging.DEBUG, colors=False)
    log = structlog.get_logger("subtile_fov.test")
    log.debug("hello", answer=42)

    out = capsys.readouterr().out
    assert "hello" in out
    assert "answer=42" in out

    configure_logging(logging.WARNING, colors=False)
    log.info("hidden")
    assert "hidden" not in capsys.readouterr().out

    structlog.reset_defaults()

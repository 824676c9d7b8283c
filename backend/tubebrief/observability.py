"""Logfire cloud observability initialization and instrumentation."""

import logging

import logfire

from tubebrief import __version__
from tubebrief.config import Settings

logger = logging.getLogger(__name__)

_initialized = False


def configure_logging(level: str = "INFO") -> None:
    """Configure stdlib logging for CLI, API and worker processes."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    # Reduce noise from HTTP libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def initialize_logfire(settings: Settings, app=None) -> None:
    """
    Initialize Logfire with instrumentation.

    Must be called ONCE at process startup. Instruments:
    - FastAPI (when an app is given)
    - PydanticAI summarizer agent
    - HTTPX clients (YouTube Data API, identity provider)
    - SQLAlchemy engines created afterwards
    - Python logging (bridges to Logfire)
    """
    global _initialized

    if _initialized:
        return

    if not settings.logfire_token:
        logger.warning("Logfire token not set - observability disabled")
        return

    try:
        logfire.configure(
            token=settings.logfire_token,
            service_name="tubebrief",
            service_version=__version__,
            environment=settings.environment,
        )

        logfire.instrument_pydantic_ai()
        logfire.instrument_httpx()
        logfire.instrument_sqlalchemy()

        if app is not None:
            logfire.instrument_fastapi(app)

        root_logger = logging.getLogger()
        root_logger.addHandler(logfire.LogfireLoggingHandler())

        _initialized = True
        logger.info("Logfire cloud tracking initialized")

    except Exception as e:
        logger.warning(f"Failed to initialize Logfire: {e}")
        # Continue running - observability is optional

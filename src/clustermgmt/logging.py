import logging
from typing import Any

import structlog


def configure_logging(level: int | str = logging.INFO) -> None:
    """Configure structlog/standard logging bridge."""

    timestamper = structlog.processors.TimeStamper(fmt="iso", utc=True)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            timestamper,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    if isinstance(level, str):
        level = level.upper()
    logging.basicConfig(level=level, format="%(message)s")


def bind_resource_context(
    environment: str, cluster: str, resource: str | None = None, **kwargs: Any
) -> structlog.stdlib.BoundLogger:
    """Bind managed-resource identity fields for downstream logs."""

    logger = structlog.get_logger()
    fields: dict[str, Any] = {"environment": environment, "cluster": cluster}
    if resource is not None:
        fields["resource"] = resource
    return logger.bind(**fields, **kwargs)

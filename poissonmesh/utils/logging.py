"""Structured logging configuration using structlog."""

import logging
import sys
import time
from pathlib import Path
from typing import Any, Optional

import structlog
from structlog.processors import CallsiteParameter

from poissonmesh.core.config import LoggingConfig


def setup_logging(
    config: Optional[LoggingConfig] = None,
    log_file: Optional[Path] = None,
) -> structlog.stdlib.BoundLogger:
    """Set up structured logging with structlog.

    Args:
        config: Logging configuration
        log_file: Optional log file path; defaults to ``log_dir/poissonmesh.log``
            when ``log_to_file`` is enabled

    Returns:
        Configured logger instance
    """
    if config is None:
        config = LoggingConfig()

    if log_file is None and config.log_to_file and config.log_dir is not None:
        config.log_dir.mkdir(parents=True, exist_ok=True)
        log_file = config.log_dir / "poissonmesh.log"

    timestamper = structlog.processors.TimeStamper(fmt=config.timestamp_format)

    shared_processors = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        timestamper,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if config.add_caller_info:
        shared_processors.append(
            structlog.processors.CallsiteParameterAdder(
                parameters=[
                    CallsiteParameter.FILENAME,
                    CallsiteParameter.LINENO,
                    CallsiteParameter.FUNC_NAME,
                ],
            ),
        )

    structlog.configure(
        processors=shared_processors + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    if config.format == "json":
        formatter = structlog.processors.JSONRenderer()
    elif config.format == "console":
        formatter = structlog.dev.ConsoleRenderer(
            colors=config.colorize and sys.stderr.isatty(),
            exception_formatter=structlog.dev.plain_traceback,
        )
    else:  # plain
        formatter = structlog.processors.KeyValueRenderer(
            key_order=["timestamp", "level", "logger", "event"],
            drop_missing=True,
        )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                formatter,
            ],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, config.level))

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                foreign_pre_chain=shared_processors,
                processors=[
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    structlog.processors.JSONRenderer(),  # Always use JSON for files
                ],
            )
        )
        root_logger.addHandler(file_handler)

    for lib in ["trimesh", "numpy"]:
        logging.getLogger(lib).setLevel(logging.WARNING)

    return structlog.get_logger("poissonmesh")


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a logger instance.

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    return structlog.get_logger(name)


def log_performance(
    logger: structlog.stdlib.BoundLogger,
    operation: str,
    duration: float,
    **kwargs: Any,
) -> None:
    """Log performance metrics.

    Args:
        logger: Logger instance
        operation: Operation name
        duration: Duration in seconds
        **kwargs: Additional metrics
    """
    logger.info(
        "performance",
        operation=operation,
        duration_ms=round(duration * 1000, 2),
        **kwargs,
    )


def log_calibration_result(
    logger: structlog.stdlib.BoundLogger,
    result: Any,  # CalibrationResult
) -> None:
    """Log the outcome of a radius calibration.

    Args:
        logger: Logger instance
        result: Calibration result object
    """
    fields = dict(
        target=result.target,
        count=result.count,
        radius=result.radius,
        iterations=result.iterations,
        trials=result.trials,
    )
    if result.converged:
        logger.info("calibration_converged", **fields)
    else:
        logger.warning("calibration_budget_exhausted", tolerance=result.tolerance, **fields)


class SamplingRun:
    """Context manager logging one sampling run on a mesh.

    Emits ``sampling_started`` on entry and ``sampling_finished`` or
    ``sampling_failed`` on exit, each tagged with the strategy name and
    the fields recorded while the run was active.
    """

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger,
        strategy: str,
        **fields: Any,
    ):
        self.logger = logger
        self.strategy = strategy
        self.fields = dict(fields)
        self.duration_ms: Optional[float] = None
        self._start: Optional[float] = None

    def __enter__(self) -> "SamplingRun":
        self._start = time.perf_counter()
        self.logger.debug("sampling_started", strategy=self.strategy, **self.fields)
        return self

    def record(self, **fields: Any) -> None:
        """Attach result fields to the closing event."""
        self.fields.update(fields)

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.duration_ms = round((time.perf_counter() - self._start) * 1000, 2)
        if exc_type is None:
            self.logger.info(
                "sampling_finished",
                strategy=self.strategy,
                duration_ms=self.duration_ms,
                **self.fields,
            )
        else:
            self.logger.error(
                "sampling_failed",
                strategy=self.strategy,
                duration_ms=self.duration_ms,
                error=str(exc_val),
                error_type=exc_type.__name__,
                **self.fields,
            )

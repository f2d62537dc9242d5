# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""structlog + stdlib bridge. Console: ConsoleRenderer, pipelines: JSONRenderer.

Engine modules log through plain ``logging.getLogger("crossnav.<module>")``.
``configure()`` routes those records through structlog, and
``evaluation_scope()`` tags every record emitted during one page evaluation
with the page URL and profile count.

Leaf module — no crossnav imports. Safe to call early in startup.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TextIO

import structlog

LOGGER_NAMESPACE = "crossnav"


def configure(*, json_output: bool = False, level: str = "INFO", stream: TextIO | None = None) -> None:
    """Configure structlog with stdlib bridge.

    Args:
        json_output: True for JSON lines, False for human-readable output.
        level: Level for the ``crossnav`` logger tree (default INFO).
            Unknown level names fall back to INFO.
        stream: Output stream (default ``sys.stderr``).
    """
    shared_processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    renderer = structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
        foreign_pre_chain=shared_processors,
    )

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    logging.getLogger(LOGGER_NAMESPACE).setLevel(getattr(logging, level.upper(), logging.INFO))


@contextmanager
def evaluation_scope(url: str, **extra: object) -> Iterator[None]:
    """Bind ``url`` (and any extra fields) to every log record in the block."""
    with structlog.contextvars.bound_contextvars(url=url, **extra):
        yield

"""Logger lookup that works both inside and outside Prefect runs."""

from __future__ import annotations

import logging

from prefect import get_run_logger
from prefect.exceptions import MissingContextError


def get_logger(name: str):
    """Return the Prefect run logger when called from a task/flow run.

    Falls back to the standard module logger, e.g. when a task function is
    invoked directly through `.fn` or from plain scripts.
    """
    try:
        return get_run_logger()
    except MissingContextError:
        return logging.getLogger(name)

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from pymongo.errors import ConnectionFailure

from ..core.exceptions import UnavailableError


@contextmanager
def translate_errors(operation: str) -> Iterator[None]:
    """Surface driver connectivity failures as UnavailableError.

    Other driver errors propagate unchanged and end up as a 500 response.
    """
    try:
        yield
    except ConnectionFailure as exc:
        raise UnavailableError(f"Storage unavailable during {operation}") from exc

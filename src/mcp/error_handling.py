"""Consistent error handling for MCP tool functions."""

from __future__ import annotations

import functools
import logging
from typing import Callable

from pydantic import ValidationError

from src.core.csv_loader import TransactionFileError
from src.core.goal_parser import GoalResolutionError

logger = logging.getLogger("goal_forecast")


def handle_tool_errors(fn: Callable) -> Callable:
    """Decorator that catches known exceptions and returns user-friendly error strings.

    MCP tools must return ``str``, not raise.  This ensures all tools
    follow that contract without duplicating try/except blocks.
    """

    @functools.wraps(fn)
    async def wrapper(*args, **kwargs):
        try:
            return await fn(*args, **kwargs)
        except GoalResolutionError as e:
            return f"Could not understand the goal: {e}"
        except TransactionFileError as e:
            return f"Could not read transactions: {e}"
        except FileNotFoundError as e:
            return f"Transaction file not found: {e.filename}"
        except ValidationError as e:
            return f"Invalid data: {e.error_count()} validation error(s). Check your input."
        except Exception as e:
            logger.exception("Unexpected error in tool %s", fn.__name__)
            return f"Unexpected error: {type(e).__name__}: {e}"

    return wrapper

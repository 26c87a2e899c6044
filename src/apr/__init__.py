"""APR package for staked yyJOE."""

from .api import app
from .service import calculate_apr, calculate_apr_async

__all__ = ["app", "calculate_apr", "calculate_apr_async"]

# File: utils/__init__.py
"""Pure Python utilities for HomeChores.

This module contains pure Python functions with ZERO Home Assistant dependencies.
All functions here can be unit tested without Home Assistant mocking.

Submodules:
    - dt_utils: Date/time parsing, timezone handling, interval arithmetic
"""

from . import dt_utils

__all__ = ["dt_utils"]

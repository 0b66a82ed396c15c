# File: utils/__init__.py
"""Pure Python utilities for ParenTime.

This module contains pure Python functions with ZERO Home Assistant dependencies.
All functions here can be unit tested without Home Assistant mocking.

⚠️ UTILS PURITY: NO `homeassistant.*` imports allowed in this module.

Submodules:
    - dt_utils: Date parsing, calendar month arithmetic, age calculations
    - id_utils: Deterministic occurrence/notification/suggestion identifiers

Usage:
    from . import dt_utils
    from .id_utils import occurrence_id
"""

from . import dt_utils, id_utils

__all__ = ["dt_utils", "id_utils"]

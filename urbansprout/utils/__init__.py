"""Utility functions"""

from urbansprout.utils.pagination import page_meta, page_window
from urbansprout.utils.validators import validate_object_id

__all__ = ["page_meta", "page_window", "validate_object_id"]

"""Form field extraction utilities for host integrations."""

from .fields import SKIPPED_BASETYPES, FormTag, extract_form_data
from .html import strip_markup

__all__ = ["SKIPPED_BASETYPES", "FormTag", "extract_form_data", "strip_markup"]

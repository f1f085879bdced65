"""Schema interpretation: grid rows -> typed schema descriptions."""

from .interpreter import RowSettings, collect_enums, interpret_sheet, interpret_workbook
from .types import PRIMITIVE_TYPES, parse_enum_body

__all__ = [
    "PRIMITIVE_TYPES",
    "RowSettings",
    "collect_enums",
    "interpret_sheet",
    "interpret_workbook",
    "parse_enum_body",
]

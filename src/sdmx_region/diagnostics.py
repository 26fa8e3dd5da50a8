from __future__ import annotations

import logging
from dataclasses import dataclass

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class StructuralDefect:
    code: str
    message: str
    dimension_index: int | None = None


def report_defect(
    defects: list[StructuralDefect],
    code: str,
    message: str,
    *,
    dimension_index: int | None = None,
) -> StructuralDefect:
    """Record a defect on the caller's list and log it; never raises."""
    defect = StructuralDefect(code=code, message=message, dimension_index=dimension_index)
    defects.append(defect)
    LOGGER.warning("%s: %s", code, message)
    return defect

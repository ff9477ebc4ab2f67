from __future__ import annotations

import logging
from typing import Dict, List, Optional

from .errors import InvalidInput, NotFound
from .models import ReasonCategory, ReasonCode

logger = logging.getLogger(__name__)

CATEGORY_LABEL: Dict[str, str] = {
    "mechanical": "Mechanical",
    "electrical": "Electrical",
    "material": "Material",
    "operator": "Operator",
    "quality": "Quality",
    "other": "Other",
}

_TABLE = [
    # mechanical
    ("MECH_BREAKDOWN", "Mechanical breakdown", "mechanical"),
    ("MECH_TOOLING", "Tooling failure / tool change", "mechanical"),
    ("MECH_HYDRAULIC", "Hydraulic / pneumatic fault", "mechanical"),
    ("MECH_JAM", "Jam or misfeed", "mechanical"),
    ("MECH_PM", "Planned maintenance", "mechanical"),
    # electrical
    ("ELEC_POWER", "Power loss", "electrical"),
    ("ELEC_CONTROLS", "PLC / controls fault", "electrical"),
    ("ELEC_SENSOR", "Sensor failure", "electrical"),
    ("ELEC_MOTOR", "Motor / drive fault", "electrical"),
    # material
    ("MAT_SHORTAGE", "Material shortage", "material"),
    ("MAT_DEFECT", "Defective material", "material"),
    ("MAT_WAITING", "Waiting on upstream", "material"),
    # operator
    ("OP_NO_OPERATOR", "No operator available", "operator"),
    ("OP_BREAK", "Break / lunch", "operator"),
    ("OP_TRAINING", "Training", "operator"),
    ("OP_SETUP", "Setup / changeover", "operator"),
    # quality
    ("QUAL_INSPECTION", "Quality inspection", "quality"),
    ("QUAL_REWORK", "Rework", "quality"),
    ("QUAL_ADJUSTMENT", "Process adjustment", "quality"),
    # other
    ("OTHER_MEETING", "Meeting", "other"),
    ("OTHER_NO_ORDERS", "No orders scheduled", "other"),
    ("OTHER", "Other", "other"),
]

REASON_CODES: Dict[str, ReasonCode] = {
    code: ReasonCode(code=code, label=label, category=category)
    for code, label, category in _TABLE
}


def lookup(code: str) -> ReasonCode:
    rc = REASON_CODES.get(code)
    if rc is None:
        raise NotFound("reason code", code)
    return rc


def codes_by_category(category: str) -> List[ReasonCode]:
    if category not in CATEGORY_LABEL:
        raise InvalidInput(f"Unknown reason category: {category}", field="reason_category")
    return [rc for rc in REASON_CODES.values() if rc.category == category]


def resolve_category(code: str, claimed: Optional[str] = None) -> ReasonCategory:
    """Category for `code`; a caller-supplied `claimed` value never wins."""
    rc = REASON_CODES.get(code)
    if rc is None:
        raise InvalidInput(f"Unknown reason code: {code}", field="reason_code")
    if claimed and claimed != rc.category:
        logger.warning("reason category %r overridden by taxonomy: %s -> %s", claimed, code, rc.category)
    return rc.category


def category_label(category: str) -> str:
    return CATEGORY_LABEL.get(category, category)

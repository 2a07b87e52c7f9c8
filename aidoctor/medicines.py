# aidoctor/medicines.py
"""Pull structured medicine entries out of the free-text analysis.

The analysis is prose produced by the language model, so everything here is
line-oriented best effort. Parsing never raises: text without a recognisable
medicines section gives an empty list.
"""
import re
from decimal import Decimal, InvalidOperation
from typing import Iterable, List, Optional

from pydantic import BaseModel

SECTION_RE = re.compile(r"MEDICINES?:([\s\S]*?)(?:\n\n|\n\d+\.|\Z)", re.IGNORECASE)
ALT_SECTION_RE = re.compile(
    r"(?:Recommended medicines|Medicines|Prescription):"
    r"([\s\S]*?)(?:\n\n|\n\d+\.|Important|When to consult|\Z)",
    re.IGNORECASE,
)

LABELLED_COST_RE = re.compile(r"(?:Cost|Approximate Cost):\s*\$?([\d,]+\.?\d*)", re.IGNORECASE)
DOLLAR_COST_RE = re.compile(r"\$([\d,]+\.?\d*)")
GENERIC_RE = re.compile(r"\(([^)]+)\)")

# bullet, then the name up to " (", ":" or "- Approximate"
BULLET_NAME_RE = re.compile(r"^\s*[-•]\s*(.*?)(?:\s*\(|:|\s*-\s*Approximate|$)")
# the MEDICINES: layout also ends the name at a bare "Approximate"
SECTION_BULLET_NAME_RE = re.compile(
    r"^\s*[-•]\s*(.*?)(?:\s*\(|:|\s*-\s*Approximate|\s*Approximate|$)"
)

MIN_NAME_LENGTH = 3


class Medicine(BaseModel):
    name: str
    generic_name: Optional[str] = None
    description: Optional[str] = None
    cost: Optional[str] = None


def _name(line: str, pattern: re.Pattern) -> str:
    m = pattern.search(line)
    if m:
        return m.group(1).strip()
    return re.sub(r"[-•]", "", line.split(":")[0], count=1).strip()


def _generic_name(line: str) -> Optional[str]:
    m = GENERIC_RE.search(line)
    return m.group(1) if m else None


def _description(line: str) -> Optional[str]:
    parts = line.split(":")
    if len(parts) < 2:
        return None
    return parts[1].split("Approximate")[0].strip() or None


def _first_dollar_amount(line: str) -> Optional[str]:
    m = DOLLAR_COST_RE.search(line)
    return m.group(1) if m else None


def _labelled_cost(line: str) -> Optional[str]:
    m = LABELLED_COST_RE.search(line)
    if m:
        return m.group(1)
    return _first_dollar_amount(line)


def _entry(line: str, name_re: re.Pattern, cost: Optional[str]) -> Optional[Medicine]:
    name = _name(line, name_re)
    if len(name) < MIN_NAME_LENGTH:
        return None
    return Medicine(
        name=name,
        generic_name=_generic_name(line),
        description=_description(line),
        cost=cost,
    )


def parse_medicines(analysis: str) -> List[Medicine]:
    if not isinstance(analysis, str) or not analysis:
        return []

    medicines: List[Medicine] = []

    section = SECTION_RE.search(analysis)
    if section is None:
        alt = ALT_SECTION_RE.search(analysis)
        if alt is None:
            return medicines
        for line in alt.group(1).split("\n"):
            if not line.strip() or "$" not in line:
                continue
            entry = _entry(line, BULLET_NAME_RE, _first_dollar_amount(line))
            if entry:
                medicines.append(entry)
        return medicines

    for line in section.group(1).split("\n"):
        if not line.strip() or ("$" not in line and "Cost" not in line):
            continue
        entry = _entry(line, SECTION_BULLET_NAME_RE, _labelled_cost(line))
        if entry:
            medicines.append(entry)
    return medicines


def cost_value(cost: Optional[str]) -> Decimal:
    """Numeric value of an extracted cost string; thousands separators are dropped."""
    if not cost:
        return Decimal("0")
    try:
        value = Decimal(cost.replace(",", ""))
    except InvalidOperation:
        return Decimal("0")
    return value if value.is_finite() else Decimal("0")


def total_cost(medicines: Iterable[Medicine]) -> Decimal:
    return sum((cost_value(m.cost) for m in medicines), Decimal("0"))

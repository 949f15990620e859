from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping

from app.schemas.equivalence import EquivalenceRecord

FORWARD = "forward"
REVERSE = "reverse"


@dataclass(frozen=True)
class AcceptedCode:
    code: str
    record: EquivalenceRecord
    direction: str  # FORWARD: plan course is the record's source


@dataclass(frozen=True)
class EquivalenceIndex:
    # plan course code -> codes that satisfy it, forward links before reverse ones
    accepted: Mapping[str, tuple[AcceptedCode, ...]] = field(default_factory=lambda: MappingProxyType({}))

    def accepted_for(self, code: str) -> tuple[AcceptedCode, ...]:
        return self.accepted.get(code, ())

    def accepted_codes(self, code: str) -> set[str]:
        return {link.code for link in self.accepted_for(code)}


def build_equivalence_index(
    course_codes: Iterable[str],
    equivalences: Iterable[EquivalenceRecord],
) -> EquivalenceIndex:
    """Map every plan course to the codes that count as passing it.

    Equivalences are stored directionally but matched both ways: for A -> B,
    B is accepted for plan course A and A is accepted for plan course B.
    Codes outside the plan only ever appear as accepted values.
    """
    plan_codes = set(course_codes)
    forward: dict[str, list[AcceptedCode]] = {}
    reverse: dict[str, list[AcceptedCode]] = {}

    for record in equivalences:
        if record.source_code in plan_codes:
            forward.setdefault(record.source_code, []).append(
                AcceptedCode(code=record.target_code, record=record, direction=FORWARD)
            )
        if record.target_code in plan_codes:
            reverse.setdefault(record.target_code, []).append(
                AcceptedCode(code=record.source_code, record=record, direction=REVERSE)
            )

    accepted: dict[str, tuple[AcceptedCode, ...]] = {}
    for code in plan_codes:
        links: list[AcceptedCode] = []
        seen: set[str] = set()
        for link in forward.get(code, []) + reverse.get(code, []):
            if link.code in seen:
                continue
            seen.add(link.code)
            links.append(link)
        if links:
            accepted[code] = tuple(links)
    return EquivalenceIndex(accepted=MappingProxyType(accepted))

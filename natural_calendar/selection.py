from functools import cmp_to_key
from typing import Iterable, List

from .config import get_testing_mode
from .logger import setup_logger
from .models import Component

logger = setup_logger('selection', testing=get_testing_mode())

# Confidence gaps at or below this are treated as ties
CONFIDENCE_TOLERANCE = 0.1


def _compare(a: Component, b: Component) -> int:
    if a.priority != b.priority:
        return b.priority - a.priority
    if abs(a.confidence - b.confidence) > CONFIDENCE_TOLERANCE:
        return -1 if a.confidence > b.confidence else 1
    return a.start - b.start


def rank(components: Iterable[Component]) -> List[Component]:
    """Order components best first: priority, then confidence, then position"""
    return sorted(components, key=cmp_to_key(_compare))


def select_components(candidates) -> List[Component]:
    """Pick the non-overlapping winners from the candidate list.

    Candidates are walked best first and each one is kept only if its span
    does not overlap a span already kept. The result is ordered by position.
    """
    selected = []
    for component in rank(candidate.component for candidate in candidates):
        clash = next((kept for kept in selected if component.overlaps(kept)), None)
        if clash:
            logger.debug(f"Dropped {component.type.value} {component.source_text!r}, "
                         f"overlaps {clash.type.value} {clash.source_text!r}")
            continue
        selected.append(component)
    return sorted(selected, key=lambda c: c.start)

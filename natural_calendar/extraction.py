from collections import namedtuple

from .config import get_testing_mode
from .logger import setup_logger

logger = setup_logger('extraction', testing=get_testing_mode())

# A component together with the pattern that produced it
Candidate = namedtuple('Candidate', ['component', 'pattern'])


def extract_candidates(text, patterns, context):
    """Run every pattern over the whole text and collect each valid match.

    Patterns do not own text: the same substring may be reported by several
    patterns. Matches whose builder returns None are dropped.
    """
    candidates = []
    for pattern in patterns:
        for match in pattern.regex.finditer(text):
            if match.end() == match.start():
                continue
            component = pattern.parse(match, context)
            if component is None:
                logger.debug(f"Discarded {pattern.name} match {match.group(0)!r}")
                continue
            candidates.append(Candidate(component, pattern))
    logger.debug(f"Extracted {len(candidates)} candidates from {text!r}")
    return candidates

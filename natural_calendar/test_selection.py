import unittest

from natural_calendar.extraction import Candidate
from natural_calendar.models import Component, ComponentType, TimeValue
from natural_calendar.selection import rank, select_components


def make(start, end, priority, confidence, type=ComponentType.TIME):
    return Component(source_text='x' * (end - start), start=start, end=end, type=type,
                     value=TimeValue(12, 0), confidence=confidence, priority=priority)


def candidates(*components):
    return [Candidate(component, None) for component in components]


class TestSelection(unittest.TestCase):
    def test_empty(self):
        self.assertEqual(select_components([]), [])

    def test_priority_beats_confidence(self):
        strong = make(0, 10, priority=10, confidence=0.5)
        confident = make(2, 5, priority=1, confidence=0.99)
        self.assertEqual(select_components(candidates(confident, strong)), [strong])

    def test_confidence_breaks_priority_ties(self):
        early = make(0, 6, priority=1, confidence=0.7)
        confident = make(5, 8, priority=1, confidence=0.95)
        self.assertEqual(select_components(candidates(early, confident)), [confident])

    def test_close_confidence_falls_back_to_position(self):
        """Gaps within the tolerance count as ties, so the earlier span wins"""
        later = make(5, 8, priority=1, confidence=0.9)
        earlier = make(0, 6, priority=1, confidence=0.85)
        self.assertEqual(select_components(candidates(later, earlier)), [earlier])

    def test_non_overlapping_components_are_all_kept_in_order(self):
        first = make(0, 3, priority=1, confidence=0.7)
        second = make(3, 6, priority=9, confidence=0.9)
        third = make(10, 12, priority=5, confidence=0.8)
        selected = select_components(candidates(third, second, first))
        self.assertEqual(selected, [first, second, third])

    def test_result_never_overlaps(self):
        components = [
            make(0, 10, priority=10, confidence=0.9, type=ComponentType.INTERVAL),
            make(0, 3, priority=5, confidence=0.95),
            make(7, 10, priority=5, confidence=0.95),
            make(9, 14, priority=2, confidence=0.9, type=ComponentType.WEEKDAY),
            make(12, 20, priority=7, confidence=0.9, type=ComponentType.RECURRENCE),
        ]
        selected = select_components(candidates(*components))
        self.assertEqual([c.type for c in selected],
                         [ComponentType.INTERVAL, ComponentType.RECURRENCE])
        for first, second in zip(selected, selected[1:]):
            self.assertFalse(first.overlaps(second))

    def test_rank(self):
        low = make(0, 1, priority=1, confidence=0.9)
        high = make(5, 6, priority=5, confidence=0.5)
        tie = make(2, 3, priority=1, confidence=0.95)
        self.assertEqual(rank([low, high, tie]), [high, low, tie])


if __name__ == '__main__':
    unittest.main()

from __future__ import annotations

import random
import unittest
from collections import Counter

from luckydraw.draw import (
    PendingSelection,
    build_pending_queue,
    sample_with_replacement,
    sample_without_replacement,
)
from luckydraw.models import Participant

# Upper 0.1% points of the chi-square distribution.
CHI2_CRITICAL_999 = {4: 18.467, 5: 20.515}


def chi_square(counts: Counter, categories: int, total: int) -> float:
    expected = total / categories
    return sum((counts.get(i, 0) - expected) ** 2 / expected for i in range(categories))


class ZeroRandom(random.Random):
    """Always picks the lowest index."""

    def randrange(self, *args, **kwargs):  # type: ignore[override]
        return 0


class SampleWithoutReplacementTests(unittest.TestCase):
    def test_indices_are_distinct_and_in_range(self) -> None:
        rng = random.Random(1)
        candidates = list("abcdefghij")
        for count in range(0, 12):
            picked = sample_without_replacement(candidates, count, rng)
            self.assertEqual(len(picked), min(count, len(candidates)))
            self.assertEqual(len(set(picked)), len(picked))
            self.assertTrue(all(0 <= i < len(candidates) for i in picked))

    def test_empty_pool_and_non_positive_count(self) -> None:
        self.assertEqual(sample_without_replacement([], 3), [])
        self.assertEqual(sample_without_replacement(["a", "b"], 0), [])
        self.assertEqual(sample_without_replacement(["a", "b"], -2), [])

    def test_same_seed_same_result(self) -> None:
        candidates = list(range(20))
        first = sample_without_replacement(candidates, 5, random.Random(42))
        second = sample_without_replacement(candidates, 5, random.Random(42))
        self.assertEqual(first, second)

    def test_each_candidate_equally_likely(self) -> None:
        rng = random.Random(20240517)
        candidates = ["a", "b", "c", "d", "e"]
        trials, k = 20000, 2
        counts: Counter = Counter()
        for _ in range(trials):
            counts.update(sample_without_replacement(candidates, k, rng))

        statistic = chi_square(counts, len(candidates), trials * k)
        self.assertLess(statistic, CHI2_CRITICAL_999[len(candidates) - 1])

    def test_first_position_equally_likely(self) -> None:
        rng = random.Random(99)
        candidates = ["a", "b", "c", "d", "e"]
        trials = 20000
        counts = Counter(
            sample_without_replacement(candidates, 1, rng)[0] for _ in range(trials)
        )
        statistic = chi_square(counts, len(candidates), trials)
        self.assertLess(statistic, CHI2_CRITICAL_999[len(candidates) - 1])


class SampleWithReplacementTests(unittest.TestCase):
    def test_length_and_range(self) -> None:
        picked = sample_with_replacement(3, 10, random.Random(5))
        self.assertEqual(len(picked), 10)
        self.assertTrue(all(0 <= i < 3 for i in picked))

    def test_repeats_allowed(self) -> None:
        self.assertEqual(sample_with_replacement(4, 3, ZeroRandom()), [0, 0, 0])

    def test_empty_inputs(self) -> None:
        self.assertEqual(sample_with_replacement(0, 3), [])
        self.assertEqual(sample_with_replacement(3, 0), [])

    def test_each_index_equally_likely(self) -> None:
        rng = random.Random(777)
        n, draws = 6, 30000
        counts = Counter(sample_with_replacement(n, draws, rng))
        statistic = chi_square(counts, n, draws)
        self.assertLess(statistic, CHI2_CRITICAL_999[n - 1])


class BuildPendingQueueTests(unittest.TestCase):
    def setUp(self) -> None:
        self.people = Participant.from_names(["Alice", "Bob", "Carol", "Dave"])

    def test_exclusion_yields_distinct_participants(self) -> None:
        queue = build_pending_queue(
            self.people, "PZ-1", 4, exclude_winners=True, rng=random.Random(3)
        )
        self.assertEqual(len(queue), 4)
        self.assertEqual(len({p.participant_id for p in queue}), 4)
        for pending in queue:
            self.assertIsInstance(pending, PendingSelection)
            self.assertEqual(pending.prize_id, "PZ-1")
            self.assertEqual(self.people[pending.reveal_index].id, pending.participant_id)

    def test_without_exclusion_repeats_are_possible(self) -> None:
        queue = build_pending_queue(
            self.people, "PZ-1", 3, exclude_winners=False, rng=ZeroRandom()
        )
        self.assertEqual([p.participant_id for p in queue], [self.people[0].id] * 3)
        self.assertEqual([p.reveal_index for p in queue], [0, 0, 0])

    def test_empty_candidates(self) -> None:
        self.assertEqual(build_pending_queue([], "PZ-1", 2, exclude_winners=True), [])


if __name__ == "__main__":
    unittest.main()

import unittest
import random

from lottoai.core.models import DrawRecord, NumberCount, PairCount
from lottoai.core.stats import FrequencyAnalyzer, compute_statistics, TOP_PAIR_LIMIT


def rec(issue, primary, secondary=None):
    return DrawRecord(issue=str(issue), date='2026-01-01', primary_numbers=primary, secondary_numbers=secondary)


class TestFrequencyAnalyzer(unittest.TestCase):
    def setUp(self):
        rng = random.Random(7)
        self.history = [
            rec(i, rng.sample(range(1, 34), 6), [rng.randint(1, 16)])
            for i in range(60)
        ]

    def test_empty_history(self):
        stats = compute_statistics([])
        self.assertEqual(stats.primary_frequency, ())
        self.assertEqual(stats.secondary_frequency, ())
        self.assertEqual(stats.top_primary_pairs, ())
        self.assertEqual(stats.total_draws, 0)
        self.assertTrue(stats.is_empty())

    def test_two_record_scenario(self):
        stats = compute_statistics([rec('a', [1, 2, 3]), rec('b', [2, 3, 4])])
        self.assertEqual(stats.primary_frequency, (
            NumberCount(2, 2), NumberCount(3, 2), NumberCount(1, 1), NumberCount(4, 1),
        ))
        self.assertEqual(stats.top_primary_pairs, (
            PairCount(2, 3, 2), PairCount(1, 2, 1), PairCount(1, 3, 1),
            PairCount(2, 4, 1), PairCount(3, 4, 1),
        ))
        self.assertEqual(stats.secondary_frequency, ())

    def test_secondary_pool_optional_per_record(self):
        stats = compute_statistics([rec('a', [1, 2], [7]), rec('b', [3, 4])])
        self.assertEqual(stats.secondary_frequency, (NumberCount(7, 1),))

    def test_primary_sum_matches_number_count(self):
        stats = compute_statistics(self.history)
        total = sum(len(r.primary_numbers) for r in self.history)
        self.assertEqual(sum(i.count for i in stats.primary_frequency), total)

    def test_every_observed_number_once_and_positive(self):
        stats = compute_statistics(self.history)
        numbers = [i.number for i in stats.primary_frequency]
        observed = {n for r in self.history for n in r.primary_numbers}
        self.assertEqual(len(numbers), len(set(numbers)))
        self.assertEqual(set(numbers), observed)
        self.assertTrue(all(i.count > 0 for i in stats.primary_frequency))

    def test_frequency_sorted_by_count_then_number(self):
        stats = compute_statistics(self.history)
        keys = [(-i.count, i.number) for i in stats.primary_frequency]
        self.assertEqual(keys, sorted(keys))

    def test_pairs_limited_and_sorted(self):
        stats = compute_statistics(self.history)
        self.assertEqual(len(stats.top_primary_pairs), TOP_PAIR_LIMIT)
        keys = [(-p.count, p.a, p.b) for p in stats.top_primary_pairs]
        self.assertEqual(keys, sorted(keys))
        self.assertTrue(all(p.a < p.b for p in stats.top_primary_pairs))

    def test_pairs_fewer_than_limit(self):
        stats = compute_statistics([rec('a', [5, 1, 9])])
        self.assertEqual(len(stats.top_primary_pairs), 3)

    def test_pair_counting_is_order_independent(self):
        shuffled = []
        rng = random.Random(3)
        for r in self.history:
            nums = list(r.primary_numbers)
            rng.shuffle(nums)
            shuffled.append(rec(r.issue, nums, r.secondary_numbers))
        self.assertEqual(compute_statistics(self.history).top_primary_pairs,
                         compute_statistics(shuffled).top_primary_pairs)

    def test_record_order_does_not_change_result(self):
        reversed_history = list(reversed(self.history))
        self.assertEqual(compute_statistics(self.history), compute_statistics(reversed_history))

    def test_idempotent(self):
        analyzer = FrequencyAnalyzer()
        self.assertEqual(analyzer.compute_statistics(self.history), analyzer.compute_statistics(self.history))

    def test_short_records_contribute_no_pairs(self):
        stats = compute_statistics([rec('a', [4]), rec('b', [])])
        self.assertEqual(stats.top_primary_pairs, ())
        self.assertEqual(stats.primary_frequency, (NumberCount(4, 1),))

    def test_duplicates_and_out_of_range_counted_as_given(self):
        stats = compute_statistics([rec('a', [3, 3, 99])])
        self.assertEqual(stats.primary_frequency, (NumberCount(3, 2), NumberCount(99, 1)))
        # 같은 번호끼리는 쌍이 아니고, 한 회차의 쌍은 한 번만 센다
        self.assertEqual(stats.top_primary_pairs, (PairCount(3, 99, 1),))

    def test_pair_count_never_exceeds_draws_with_repeated_digits(self):
        history = [rec('a', [1, 1, 2, 2, 3, 1, 9]), rec('b', [2, 1, 1, 1, 1, 1, 1])]
        stats = compute_statistics(history)
        self.assertEqual(stats.top_primary_pairs[0], PairCount(1, 2, 2))
        self.assertTrue(all(p.count <= stats.total_draws for p in stats.top_primary_pairs))
        self.assertEqual(stats.primary_frequency[0], NumberCount(1, 9))

    def test_custom_pair_limit(self):
        stats = FrequencyAnalyzer(top_pair_limit=2).compute_statistics(self.history)
        self.assertEqual(len(stats.top_primary_pairs), 2)

    def test_hot_and_cold_numbers(self):
        stats = compute_statistics([rec('a', [1, 2, 3]), rec('b', [2, 3, 4])])
        self.assertEqual([i.number for i in stats.hot_numbers(2)], [2, 3])
        self.assertEqual([i.number for i in stats.cold_numbers(2)], [1, 4])
        self.assertEqual(stats.cold_numbers(0), ())


if __name__ == '__main__':
    unittest.main()

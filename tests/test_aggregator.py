import os
import sys
import unittest

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from generators import standard_profile
from trace_model_tool.aggregator import aggregate, to_categories, category_totals
from trace_model_tool.cpu_profile import CpuProfile
from trace_model_tool.exceptions import UnknownTargetError


class TestAggregate(unittest.TestCase):
    def test_aggregates_subset_of_the_hierarchy(self):
        profile = CpuProfile(standard_profile(), -1, -1)
        result = aggregate(profile.hierarchy, ['a', 'c', 'd', 'f'])

        self.assertEqual(result['c'].total, 0)  # contained by a
        self.assertEqual(result['a'].total, 225)
        self.assertEqual(result['d'].total, 100)
        self.assertEqual(result['f'].total, 15)

    def test_aggregates_multiple_call_sites(self):
        profile = CpuProfile(standard_profile(extra_c=True), -1, -1)
        aggregations = aggregate(profile.hierarchy, ['a', 'c', 'd', 'f'])

        self.assertEqual(aggregations['c'].total, 10)
        self.assertEqual(aggregations['a'].total, 225)
        self.assertEqual(aggregations['d'].total, 100)
        self.assertEqual(aggregations['f'].total, 15)

    def test_result_order_follows_request(self):
        profile = CpuProfile(standard_profile(), -1, -1)
        aggregations = aggregate(profile.hierarchy, ['f', 'd', 'a', 'c'])
        self.assertEqual(list(aggregations.keys()), ['f', 'd', 'a', 'c'])

    def test_self_attributed_and_callframes(self):
        profile = CpuProfile(standard_profile(), -1, -1)
        a = aggregate(profile.hierarchy, ['a', 'c'])['a']

        self.assertEqual(a.self_time, 100)
        self.assertEqual(a.attributed, 125)
        self.assertEqual([record.self_time for record in a.callframes], [100, 50, 75])
        self.assertEqual(a.callframes[2].stack, ['(root)', 'a', 'c'])
        self.assertEqual(a.callframes[2].call_frame.function_name, 'c')

    def test_nested_same_name_rolls_into_outermost(self):
        profile = CpuProfile(standard_profile(), -1, -1)
        # e 吸收 f，f 不再单独计数
        aggregations = aggregate(profile.hierarchy, ['e', 'f'])
        self.assertEqual(aggregations['e'].total, 40)
        self.assertEqual(aggregations['f'].total, 0)

    def test_unmatched_target_is_zero(self):
        profile = CpuProfile(standard_profile(), -1, -1)
        aggregations = aggregate(profile.hierarchy, ['missing'])
        self.assertEqual(aggregations['missing'].total, 0)
        self.assertEqual(aggregations['missing'].callframes, [])


class TestToCategories(unittest.TestCase):
    def setUp(self):
        profile = CpuProfile(standard_profile(extra_c=True), -1, -1)
        self.aggregations = aggregate(profile.hierarchy, ['a', 'c', 'd', 'f'])

    def test_creates_a_categorized_map(self):
        categorized = to_categories(self.aggregations, {'cat1': ['a', 'c'], 'cat2': ['d'], 'cat3': ['f']})

        self.assertEqual(len(categorized['cat1']), 2)
        self.assertEqual(len(categorized['cat2']), 1)
        self.assertEqual(len(categorized['cat3']), 1)

        self.assertEqual([r.name for r in categorized['cat1']], ['a', 'c'])
        self.assertEqual(categorized['cat2'][0].name, 'd')
        self.assertEqual(categorized['cat3'][0].name, 'f')

    def test_category_totals(self):
        categorized = to_categories(self.aggregations, {'cat1': ['a', 'c'], 'cat2': ['d']})
        self.assertEqual(category_totals(categorized), {'cat1': 235, 'cat2': 100})

    def test_unknown_target_raises(self):
        with self.assertRaises(UnknownTargetError) as ctx:
            to_categories(self.aggregations, {'cat1': ['a', 'zzz']})
        self.assertEqual(ctx.exception.name, 'zzz')
        self.assertEqual(ctx.exception.category, 'cat1')


if __name__ == '__main__':
    unittest.main()

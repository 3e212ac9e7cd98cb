"""
Tests for the per-call line index.
"""

import unittest

from patchpilot.utils.diff_utils.application.line_index import LineIndex


class TestLineIndex(unittest.TestCase):
    """Test cases for LineIndex."""

    def setUp(self):
        self.lines = ["a", "b", "a", "c", "a", ""]

    def test_membership(self):
        index = LineIndex(self.lines)

        self.assertIn("a", index)
        self.assertIn("", index)
        self.assertNotIn("z", index)
        self.assertEqual(index.line_count, 6)

    def test_positions(self):
        index = LineIndex(self.lines)

        self.assertEqual(index.positions("a"), [0, 2, 4])
        self.assertEqual(index.positions("c"), [3])
        self.assertEqual(index.positions("z"), [])
        self.assertFalse(index.sampled)

    def test_sampling_drops_frequent_lines(self):
        index = LineIndex(self.lines, sampling_threshold=3, max_positions=2)

        self.assertTrue(index.sampled)
        # "a" occurs three times: membership is kept, positions are not
        self.assertIn("a", index)
        self.assertIsNone(index.positions("a"))
        self.assertEqual(index.positions("b"), [1])
        self.assertEqual(index.positions("z"), [])

    def test_empty_file(self):
        index = LineIndex([])

        self.assertNotIn("a", index)
        self.assertEqual(index.positions("a"), [])


if __name__ == "__main__":
    unittest.main()

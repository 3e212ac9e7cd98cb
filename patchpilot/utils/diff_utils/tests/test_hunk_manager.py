"""
Tests for line-range comparison and per-hunk revert.
"""

import unittest

from patchpilot.utils.diff_utils.application.hunk_manager import (
    ChangedHunkRange,
    HunkManager,
    HunkReviewSession,
)

ORIGINAL = "line 1\nline 2\nline 3\nline 4"
MODIFIED = "line 1\nline 2 modified\nline 3\nline 4 modified\nline 5 added"


class TestHunkManager(unittest.TestCase):
    """Test cases for HunkManager."""

    def setUp(self):
        self.manager = HunkManager()

    def test_compare(self):
        hunks = self.manager.compare(ORIGINAL, MODIFIED)

        self.assertEqual(hunks, [
            ChangedHunkRange(original_start=1, original_length=1, modified_start=1, modified_length=1),
            ChangedHunkRange(original_start=3, original_length=1, modified_start=3, modified_length=2),
        ])

    def test_identical_texts(self):
        self.assertEqual(self.manager.compare(ORIGINAL, ORIGINAL), [])

    def test_whitespace_is_significant(self):
        hunks = self.manager.compare("a\nb\n", "a\nb \n")
        self.assertEqual(hunks, [ChangedHunkRange(1, 1, 1, 1)])

    def test_revert_single_hunk(self):
        hunks = self.manager.compare(ORIGINAL, MODIFIED)

        reverted = self.manager.revert_hunk(ORIGINAL, MODIFIED, hunks[0])

        self.assertEqual(reverted, "line 1\nline 2\nline 3\nline 4 modified\nline 5 added")

    def test_revert_every_hunk_restores_original(self):
        hunks = self.manager.compare(ORIGINAL, MODIFIED)
        self.assertEqual(self.manager.revert_hunks(ORIGINAL, MODIFIED, hunks), ORIGINAL)

    def test_revert_addition_and_deletion(self):
        original = "a\nb\nc\n"
        added = "a\nb\nnew\nc\n"
        removed = "a\nc\n"

        addition = self.manager.compare(original, added)
        deletion = self.manager.compare(original, removed)

        self.assertTrue(addition[0].is_addition)
        self.assertTrue(deletion[0].is_deletion)
        self.assertEqual(self.manager.revert_hunk(original, added, addition[0]), original)
        self.assertEqual(self.manager.revert_hunk(original, removed, deletion[0]), original)

    def test_revert_keeps_crlf(self):
        original = "a\r\nb\r\nc\r\n"
        modified = "a\r\nB\r\nc\r\n"
        hunks = self.manager.compare(original, modified)

        self.assertEqual(self.manager.revert_hunk(original, modified, hunks[0]), original)


class TestHunkReviewSession(unittest.TestCase):
    """Test cases for HunkReviewSession."""

    def setUp(self):
        self.session = HunkReviewSession(ORIGINAL, MODIFIED, file_path="notes.txt")

    def test_reject_one_hunk(self):
        self.assertEqual(len(self.session.hunks()), 2)

        content = self.session.reject(1)

        self.assertEqual(content, "line 1\nline 2 modified\nline 3\nline 4")
        self.assertEqual(len(self.session.hunks()), 1)
        self.assertFalse(self.session.is_unchanged)

    def test_reject_all_then_reset(self):
        self.session.reject(0)
        self.session.reject(0)
        self.assertTrue(self.session.is_unchanged)

        self.assertEqual(self.session.reset(), MODIFIED)
        self.assertEqual(len(self.session.hunks()), 2)

    def test_reject_unknown_index(self):
        with self.assertRaises(IndexError):
            self.session.reject(5)


if __name__ == "__main__":
    unittest.main()

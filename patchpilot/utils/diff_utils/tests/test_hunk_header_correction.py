"""
Tests for hunk header count correction.
"""

import copy
import unittest

from patchpilot.utils.diff_utils.application.hunk_header_correction import (
    UNKNOWN_FILE,
    correct_hunk_headers,
)
from patchpilot.utils.diff_utils.parsing.diff_parser import parse_patch

WRONG_COUNTS = """--- a/src/module.py
+++ b/src/module.py
@@ -10,5 +10,6 @@ class Example:
     def method(self):
-        return 1
+        value = 1
+        return value
 
@@ -30,2 +31,2 @@
 def other():
-    pass
+    return None
"""


class TestHunkHeaderCorrection(unittest.TestCase):
    """Test cases for correct_hunk_headers."""

    def setUp(self):
        self.patches = parse_patch(WRONG_COUNTS)

    def test_counts_are_recomputed(self):
        result = correct_hunk_headers(self.patches)

        first = result.corrected_patches[0].hunks[0]
        self.assertEqual((first.old_lines, first.new_lines), (3, 4))
        self.assertTrue(result.correction_details.corrections_made)

    def test_report_contents(self):
        details = correct_hunk_headers(self.patches).correction_details

        # Only the first hunk was wrong
        self.assertEqual(len(details.corrections), 1)
        correction = details.corrections[0]
        self.assertEqual(correction.file_path, "src/module.py")
        self.assertEqual(correction.hunk_index, 1)
        self.assertEqual((correction.original_old, correction.corrected_old), (5, 3))
        self.assertEqual((correction.original_new, correction.corrected_new), (6, 4))
        self.assertEqual(details.files_corrected(), {"src/module.py"})
        self.assertEqual(details.for_file("other.py"), [])
        self.assertEqual(correction.describe(),
                         "src/module.py [Hunk 1]: Old lines 5 -> 3, New lines 6 -> 4")

    def test_four_old_five_new_lines(self):
        patches = parse_patch("--- a/f\n+++ b/f\n@@ -1,5 +1,6 @@\n a\n b\n-c\n+C\n+D\n d\n")
        result = correct_hunk_headers(patches)

        hunk = result.corrected_patches[0].hunks[0]
        self.assertEqual((hunk.old_lines, hunk.new_lines), (4, 5))
        self.assertTrue(result.correction_details.corrections_made)

    def test_second_pass_reports_nothing(self):
        once = correct_hunk_headers(self.patches)
        twice = correct_hunk_headers(once.corrected_patches)

        self.assertFalse(twice.correction_details.corrections_made)
        self.assertEqual(twice.correction_details.corrections, [])
        self.assertEqual(twice.corrected_patches, once.corrected_patches)

    def test_input_is_not_modified(self):
        snapshot = copy.deepcopy(self.patches)
        correct_hunk_headers(self.patches)
        self.assertEqual(self.patches, snapshot)

    def test_patch_without_file_name(self):
        patches = parse_patch("@@ -1,3 +1,3 @@\n-a\n+b\n")
        details = correct_hunk_headers(patches).correction_details

        self.assertEqual(details.corrections[0].file_path, UNKNOWN_FILE)

    def test_empty_input(self):
        result = correct_hunk_headers([])

        self.assertEqual(result.corrected_patches, [])
        self.assertFalse(result.correction_details.corrections_made)

    def test_none(self):
        with self.assertRaises(TypeError):
            correct_hunk_headers(None)


if __name__ == "__main__":
    unittest.main()

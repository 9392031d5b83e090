import unittest

from propfile.properties_layout import PropertiesLayout, render_layout
from propfile.properties_parser import parse_properties


def _layout(data: bytes) -> PropertiesLayout:
    _, lines = parse_properties(data)
    return PropertiesLayout(lines)


class TestRenderLayout(unittest.TestCase):

    def test_scenario_round_trip_without_edits(self):
        _, lines = parse_properties(b"name = value 1\n#comment\nmulti = a\\\nb\n")
        self.assertEqual(render_layout(lines), b"name = value 1\n#comment\nmulti = a \nb\n\n")

    def test_properties_are_written_in_canonical_form(self):
        _, lines = parse_properties(b"key=value\n  spaced.key   =   spaced value   \n")
        self.assertEqual(render_layout(lines), b"key = value\nspaced.key = spaced value\n\n")

    def test_comments_and_plain_lines_are_verbatim(self):
        data = b"#  indented   comment = x\n!bang\n  plain text  \n"
        _, lines = parse_properties(data)
        self.assertEqual(render_layout(lines), data + b"\n")

    def test_multi_line_keeps_continuation_indentation(self):
        _, lines = parse_properties(b"k = one\\\n    two\\\n    three\n")
        self.assertEqual(render_layout(lines), b"k = one \n    two \n    three\n\n")

    def test_empty_sequence_renders_a_blank_line(self):
        self.assertEqual(render_layout([]), b"\n")

    def test_render_is_stable_for_single_line_files(self):
        data = b"# header\nk1 = v1\nk2=v2\n\n\nk3 =  spaced value  \n"
        content, lines = parse_properties(data)
        rendered = render_layout(lines)

        reparsed_content, reparsed_lines = parse_properties(rendered)

        self.assertEqual(reparsed_content, content)
        self.assertEqual(render_layout(reparsed_lines), rendered)


class TestPropertiesLayout(unittest.TestCase):

    def test_append_then_render(self):
        layout = _layout(b"a = 1\n# c\nm = x\\\n  y\n")
        before = layout.layout_as_bytes

        line = layout.append("k", "v")

        self.assertTrue(line.is_property())
        self.assertIs(layout.lines[-1], line)
        self.assertEqual(layout.layout_as_bytes, before[:-1] + b"k = v\n\n")

    def test_update_collapses_multi_line(self):
        layout = _layout(b"multi = a\\\nb\nafter = x\n")

        updated = layout.update("multi", "plain")

        self.assertEqual(updated, 1)
        self.assertFalse(layout.lines[0].is_multi_line_property())
        self.assertEqual(layout.layout_as_bytes, b"multi = plain\nafter = x\n\n")

    def test_update_changes_every_matching_line(self):
        layout = _layout(b"k = 1\nother = 2\nk = 3\n")
        self.assertEqual(layout.update("k", "new"), 2)
        self.assertEqual(layout.layout_as_bytes, b"k = new\nother = 2\nk = new\n\n")

    def test_update_ignores_comments_and_unknown_keys(self):
        layout = _layout(b"# k\nk = 1\n")
        self.assertEqual(layout.update("# k", "x"), 0)
        self.assertEqual(layout.update("missing", "x"), 0)
        self.assertEqual(layout.layout_as_bytes, b"# k\nk = 1\n\n")

    def test_remove_drops_the_whole_logical_line(self):
        layout = _layout(b"a = 1\n# c\nb = 2\\\n  more\nc = 3\n")

        removed = layout.remove("b")

        self.assertEqual(removed, 1)
        self.assertEqual(layout.layout_as_bytes, b"a = 1\n# c\nc = 3\n\n")

    def test_remove_duplicates_and_missing(self):
        layout = _layout(b"k = 1\nk = 2\nj = 3\n")
        self.assertEqual(layout.remove("k"), 2)
        self.assertEqual(layout.remove("k"), 0)
        self.assertEqual(layout.layout_as_bytes, b"j = 3\n\n")

    def test_new_layout_is_empty(self):
        layout = PropertiesLayout()
        layout.append("a", "1")
        self.assertEqual(layout.layout_as_bytes, b"a = 1\n\n")


if __name__ == '__main__':
    unittest.main()

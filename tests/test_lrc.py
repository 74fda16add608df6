from core.lrc import find_line_index, parse_lrc, strip_timestamps
from core.models import LineTimestamp


class TestParseLrc:

    def test_basic_lines_sorted(self):
        lrc = "[00:05.00]second\n[00:01.50]first\n"
        assert parse_lrc(lrc) == LineTimestamp(((1500, "first"), (5000, "second")))

    def test_fraction_precision(self):
        lines = parse_lrc("[00:01.5]a\n[00:02.25]b\n[00:03.125]c\n[00:04]d").lines
        assert [t for t, _ in lines] == [1500, 2250, 3125, 4000]

    def test_multiple_timestamps_per_line(self):
        lines = parse_lrc("[00:10.00][01:00.00]chorus").lines
        assert lines == ((10000, "chorus"), (60000, "chorus"))

    def test_metadata_tags_ignored(self):
        lrc = "[ar:Artist]\n[ti:Title]\n[offset:+100]\n[length: 03:20]\n[00:01.00]hello"
        assert parse_lrc(lrc).lines == ((1000, "hello"),)

    def test_empty_text_kept_as_gap(self):
        assert parse_lrc("[00:01.00]a\n[00:02.00]\n").lines == ((1000, "a"), (2000, ""))

    def test_untimed_lines_skipped(self):
        assert parse_lrc("just words\n[00:01.00]timed").lines == ((1000, "timed"),)

    def test_empty_input(self):
        assert parse_lrc("").is_empty()


def test_strip_timestamps():
    assert strip_timestamps("[ar:x]\n[00:01.00]one\n[00:02.00][00:03.00]two") == "one\ntwo"


class TestFindLineIndex:
    LINES = ((1000, "a"), (2000, "b"), (3000, "c"))

    def test_before_first(self):
        assert find_line_index(self.LINES, 500) == -1

    def test_exact_boundary(self):
        assert find_line_index(self.LINES, 2000) == 1

    def test_after_last(self):
        assert find_line_index(self.LINES, 99999) == 2

    def test_empty(self):
        assert find_line_index((), 1000) == -1

"""Title and description clean-up heuristics."""

from linkpreview.utils.text import clean_break, parse_site_name_from_title, pure_title


def test_pure_title_drops_trailing_site_segment() -> None:
    assert pure_title("Foo Bar - Example Site") == "FooBar"


def test_pure_title_single_segment_unchanged() -> None:
    assert pure_title("NoHyphenTitle") == "NoHyphenTitle"


def test_pure_title_removes_spaces_without_separator() -> None:
    assert pure_title("Example Domain") == "ExampleDomain"


def test_pure_title_underscore_counts_as_separator() -> None:
    assert pure_title("part_one_Site") == "partone"


def test_pure_title_empty() -> None:
    assert pure_title("") == ""


def test_site_name_is_last_segment() -> None:
    assert parse_site_name_from_title("Foo Bar - Example Site") == "ExampleSite"


def test_site_name_accepts_pipe_and_fullwidth_hyphen() -> None:
    assert parse_site_name_from_title("Daily News | The Paper") == "ThePaper"
    assert parse_site_name_from_title("記事－サイト") == "サイト"


def test_site_name_collapses_line_breaks() -> None:
    assert parse_site_name_from_title("Article\n - \r\nMy Site") == "MySite"


def test_site_name_of_empty_title_is_empty() -> None:
    assert parse_site_name_from_title("") == ""


def test_title_and_site_name_split_the_same_segments() -> None:
    title = "Part A - Part B - Site"
    assert pure_title(title) == "PartAPartB"
    assert parse_site_name_from_title(title) == "Site"
    assert pure_title(title) + parse_site_name_from_title(title) == title.replace(" ", "").replace("-", "")


def test_clean_break_collapses_runs() -> None:
    assert clean_break("Line1\n\r  Line2") == "Line1 Line2"
    assert clean_break("a\t\tb") == "a b"
    assert clean_break("") == ""

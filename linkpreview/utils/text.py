import re

_break_re = re.compile(r'[\r\n\s]+')


def clean_break(text: str) -> str:
    """Collapse whitespace and line-break runs into single spaces."""
    if not text:
        return ""
    return _break_re.sub(' ', text)


def pure_title(title: str) -> str:
    """Drop the trailing site-name segment from a "Page - Site" title.

    Spaces are removed and underscores count as separators, so
    "Foo Bar - Example Site" becomes "FooBar".
    """
    text = (title or "").replace('_', '-').replace(' ', '')
    parts = text.split('-')
    if len(parts) <= 1:
        return text
    return ''.join(parts[:-1])


def parse_site_name_from_title(title: str) -> str:
    """Guess a site name from the last separator segment of a title."""
    text = clean_break(title or "").replace('_', '-').replace(' ', '')
    text = text.replace('－', '-').replace('|', '-')  # full-width hyphen, pipe
    return text.split('-')[-1]

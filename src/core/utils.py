import re
import unicodedata


def lower_lay_string(s: str) -> str:
    """Normalize the string and drop accents (NFKD, combining marks removed)."""
    normalized = unicodedata.normalize('NFKD', s)
    return ''.join(c for c in normalized if not unicodedata.combining(c))


def collapse(s: str) -> str:
    """Collapse runs of whitespace into a single space and trim both ends."""
    return re.sub(r'\s+', ' ', s).strip()


def prepare_input(input_str: str) -> str:
    prepared_input = lower_lay_string(input_str)

    # punctuation -> space
    prepared_input = re.sub(r"[`~!@#$%^&*()_|+\-=?;:\",.<>{}\[\]\\\/]", " ", prepared_input)

    prepared_input = re.sub(r"[’']", "", prepared_input)
    prepared_input = prepared_input.lower()
    prepared_input = collapse(prepared_input)

    return prepared_input

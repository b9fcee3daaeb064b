"""Header field lookup on raw message text.

Only the header block is scanned: it ends at the first empty line. Lines are
split on LF with a trailing CR dropped, so CRLF and bare LF bodies behave the
same. Everything else in the message stays opaque.
"""

SUBJECT_FIELD = "Subject"


def extract_header(body: str, field_name: str) -> str:
    """Return the value of the first header line named field_name.

    Args:
        body: Raw message text
        field_name: Header name, matched case-insensitively

    Returns:
        str: Value after the colon with surrounding whitespace stripped,
            or "" when no header line matches before the blank line

    Examples:
        "Subject: Hello\\r\\n\\r\\nBody" -> "Hello"
        "SUBJECT:   spaced  \\r\\n\\r\\n" -> "spaced"
        "just text" -> ""
    """
    wanted = field_name.lower()
    for line in body.split("\n"):
        if line.endswith("\r"):
            line = line[:-1]

        if line == "":
            break

        name, colon, value = line.partition(":")
        if colon and name.lower() == wanted:
            return value.strip()
    return ""


def parse_subject(body: str) -> str:
    """Return the Subject header value, or "" if there is none."""
    return extract_header(body, SUBJECT_FIELD)

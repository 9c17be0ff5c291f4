"""Content-type classifier: is a body worth capturing as text?

Deliberately not a MIME parser. A case-insensitive search for any of
the textual markers anywhere in the raw header value:

    "application/json"        -> True
    "apPlication/JSON"        -> True
    "blah/xml/blih"           -> True
    "jsan"                    -> False
    ""                        -> False

Anything else (images, octet-stream, protobuf...) is treated as opaque
binary and never copied into a ReportLog.
"""
from __future__ import annotations

import re

_PARSEABLE = re.compile(r"json|text|xml|x-www-form-urlencoded", re.IGNORECASE)


def is_parseable_content_type(value: str | None) -> bool:
    """True if a body with this Content-Type should be captured."""
    if not value:
        return False
    return _PARSEABLE.search(value) is not None

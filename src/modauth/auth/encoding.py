"""Deterministic ``application/x-www-form-urlencoded`` encoding.

Bodies sent to mod.io are encoded with their keys in ascending
lexicographic order, independent of the order in which fields were added.
This keeps wire bodies stable and testable.
"""

from __future__ import annotations

from typing import Mapping, Optional
from urllib.parse import quote_plus, urlencode


def encode_query(fields: Mapping[str, Optional[str]]) -> str:
    """Form-encode *fields* sorted by key.

    Values are percent-encoded the way HTML forms do it: spaces become
    ``+``, ``*`` stays literal and ``~`` is escaped. Keys mapped to
    ``None`` are left out entirely rather than emitted as empty values.

    Example::

        >>> encode_query({"email": "a@b.com", "appdata": "T1"})
        'appdata=T1&email=a%40b.com'
    """
    pairs = [(key, value) for key, value in sorted(fields.items()) if value is not None]
    return urlencode(pairs, safe="*", quote_via=_form_quote)


def _form_quote(value: str, safe: str = "", encoding=None, errors=None) -> str:
    # quote_plus never escapes "~"; HTML form serialization does.
    return quote_plus(value, safe, encoding, errors).replace("~", "%7E")

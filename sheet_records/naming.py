"""
Naming helpers for sheet-records.

- ``pluralize(noun)``: derive the default sheet name from a record type
  name (``User`` -> ``Users``, ``Person`` -> ``People``).
- ``column_name(index)``: spreadsheet column letters for a 0-based
  column index (0 -> ``A``, 26 -> ``AA``).

English plurals come from ``inflect`` (modern, non-classical forms).
Only the last word of a compound name is pluralized, so ``UserAccount``
becomes ``UserAccounts`` and ``order_item`` becomes ``order_items``.
The case style of that word (lower, Capitalized, UPPER) is preserved.
"""

from __future__ import annotations

import re

import inflect

_ENGINE = inflect.engine()

# Last word of a CamelCase / snake_case / plain identifier
_LAST_WORD = re.compile(r"(?:[A-Z]?[a-z]+|[A-Z]+)$")


def _match_case(template: str, plural: str) -> str:
    """Apply the case style of *template* to *plural*."""
    if len(template) > 1 and template.isupper():
        return plural.upper()
    if template[:1].isupper():
        return plural[:1].upper() + plural[1:]
    return plural


def pluralize(noun: str) -> str:
    """Return the English plural of *noun*.

    Examples::

        pluralize("User")         # "Users"
        pluralize("Category")     # "Categories"
        pluralize("Analysis")     # "Analyses"
        pluralize("Person")       # "People"
        pluralize("UserAccount")  # "UserAccounts"
        pluralize("Sheep")        # "Sheep"

    An empty string stays empty (the pipeline then reports a missing
    sheet name).
    """
    if not noun:
        return ""
    match = _LAST_WORD.search(noun)
    if match is None:
        # Trailing digits/punctuation: nothing sensible to inflect
        return noun + "s"
    prefix, word = noun[: match.start()], match.group(0)
    return prefix + _match_case(word, _ENGINE.plural_noun(word.lower()))


def column_name(index: int) -> str:
    """Convert a 0-based column index into spreadsheet column letters.

    0 -> ``A``, 25 -> ``Z``, 26 -> ``AA``, 701 -> ``ZZ``, 702 -> ``AAA``.
    """
    if index < 0:
        raise ValueError(f"Column index must be non-negative, got {index}")
    index += 1
    letters = ""
    while index > 0:
        index, remainder = divmod(index - 1, 26)
        letters = chr(ord("A") + remainder) + letters
    return letters

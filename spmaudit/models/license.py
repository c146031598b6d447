"""
License classification for spm-audit.

License files are classified by an ordered table of keyword rules. The
first rule that matches wins, so the more specific GNU variants are listed
before the generic GPL entry. Matching is case-insensitive and on whole
words, which keeps ``MIT`` from matching inside ``SUBMIT``.
"""

from __future__ import annotations

import re
import enum
from dataclasses import dataclass
from typing import Pattern, Sequence, Tuple


class LicenseCategory(enum.Enum):
    """License family detected for a dependency."""

    MIT = "MIT"
    APACHE = "Apache"
    BSD = "BSD"
    ISC = "ISC"
    GPL = "GPL"
    LGPL = "LGPL"
    AGPL = "AGPL"
    MPL = "MPL"
    EPL = "EPL"
    EUPL = "EUPL"
    UNLICENSE = "Unlicense"
    CC0 = "CC0"
    ARTISTIC = "Artistic"
    BOOST = "Boost"
    WTFPL = "WTFPL"
    ZLIB = "zlib"
    OTHER = "Other"
    MISSING = "Missing"
    UNKNOWN = "Unknown"

    @property
    def is_permissive(self) -> bool:
        return self in _PERMISSIVE

    @property
    def is_copyleft(self) -> bool:
        return self in _COPYLEFT


_PERMISSIVE = frozenset(
    {
        LicenseCategory.MIT,
        LicenseCategory.APACHE,
        LicenseCategory.BSD,
        LicenseCategory.ISC,
        LicenseCategory.UNLICENSE,
        LicenseCategory.CC0,
        LicenseCategory.ARTISTIC,
        LicenseCategory.BOOST,
        LicenseCategory.WTFPL,
        LicenseCategory.ZLIB,
    }
)

_COPYLEFT = frozenset(
    {
        LicenseCategory.GPL,
        LicenseCategory.LGPL,
        LicenseCategory.AGPL,
        LicenseCategory.MPL,
        LicenseCategory.EPL,
        LicenseCategory.EUPL,
    }
)


def _word_pattern(phrase: str) -> Pattern[str]:
    return re.compile(r"(?<![A-Z0-9])" + re.escape(phrase) + r"(?![A-Z0-9])")


@dataclass(frozen=True)
class LicenseRule:
    """
    One row of the classification table.

    Attributes:
        category: Category reported when the rule matches.
        keywords: Upper-case phrases looked for in the license text.
        match_all: Require every keyword instead of any one of them.
        exclusions: Phrases that veto the rule when present.
        requirements: Phrases that must all be present in addition.
    """

    category: LicenseCategory
    keywords: Tuple[str, ...]
    match_all: bool = False
    exclusions: Tuple[str, ...] = ()
    requirements: Tuple[str, ...] = ()

    def matches(self, text: str) -> bool:
        """Return True if the upper-cased ``text`` satisfies this rule."""
        if any(_word_pattern(word).search(text) for word in self.exclusions):
            return False

        hits = [_word_pattern(word).search(text) is not None for word in self.keywords]
        if not (all(hits) if self.match_all else any(hits)):
            return False

        return all(_word_pattern(word).search(text) for word in self.requirements)


LICENSE_RULES: Sequence[LicenseRule] = (
    # GNU family, most specific first
    LicenseRule(
        LicenseCategory.AGPL,
        ("GNU AFFERO GENERAL PUBLIC LICENSE", "AGPL"),
    ),
    LicenseRule(
        LicenseCategory.LGPL,
        (
            "GNU LESSER GENERAL PUBLIC LICENSE",
            "GNU LIBRARY GENERAL PUBLIC LICENSE",
            "LGPL",
        ),
    ),
    LicenseRule(
        LicenseCategory.GPL,
        ("GNU GENERAL PUBLIC LICENSE", "GPL"),
        exclusions=("LGPL", "AGPL", "LESSER", "AFFERO"),
        requirements=("VERSION",),
    ),
    # Permissive
    LicenseRule(
        LicenseCategory.MIT,
        ("MIT LICENSE", "MIT", "PERMISSION IS HEREBY GRANTED"),
    ),
    LicenseRule(
        LicenseCategory.APACHE,
        ("APACHE LICENSE", "APACHE", "VERSION 2.0"),
    ),
    LicenseRule(
        LicenseCategory.BSD,
        ("BSD", "REDISTRIBUTION", "BSD-2-CLAUSE", "BSD-3-CLAUSE"),
    ),
    LicenseRule(
        LicenseCategory.ISC,
        ("ISC LICENSE", "ISC", "PERMISSION TO USE"),
    ),
    # Weak and strong copyleft
    LicenseRule(LicenseCategory.MPL, ("MOZILLA PUBLIC LICENSE", "MPL")),
    LicenseRule(LicenseCategory.EPL, ("ECLIPSE PUBLIC LICENSE", "EPL")),
    LicenseRule(LicenseCategory.EUPL, ("EUROPEAN UNION PUBLIC LICENCE", "EUPL")),
    # Public domain
    LicenseRule(
        LicenseCategory.UNLICENSE,
        (
            "UNLICENSE",
            "THIS IS FREE AND UNENCUMBERED SOFTWARE RELEASED INTO THE PUBLIC DOMAIN",
        ),
    ),
    LicenseRule(LicenseCategory.CC0, ("CC0", "CREATIVE COMMONS ZERO")),
    # Others
    LicenseRule(LicenseCategory.ARTISTIC, ("ARTISTIC LICENSE",)),
    LicenseRule(LicenseCategory.BOOST, ("BOOST SOFTWARE LICENSE",)),
    LicenseRule(LicenseCategory.WTFPL, ("WTFPL", "DO WHAT THE FUCK YOU WANT")),
    LicenseRule(LicenseCategory.ZLIB, ("ZLIB LICENSE",)),
)


def classify_license(content: str) -> LicenseCategory:
    """Classify license text with :data:`LICENSE_RULES`.

    Whitespace runs are collapsed first so phrases wrapped across lines
    still match.

    Example:
        >>> classify_license("MIT License\\n\\nPermission is hereby granted")
        <LicenseCategory.MIT: 'MIT'>
        >>> classify_license("Please submit patches")
        <LicenseCategory.OTHER: 'Other'>
    """
    text = " ".join(content.upper().split())
    for rule in LICENSE_RULES:
        if rule.matches(text):
            return rule.category
    return LicenseCategory.OTHER

"""Accessor call detection: literal pre-filter plus capture regex.

Two stages, cheapest first:
- LiteralMatcher: Aho-Corasick automaton answering "does any accessor
  prefix occur in this text?" in one linear pass.
- Extractor: regex that pulls the quoted string argument out of a call
  such as ``std::env::var("DATABASE_URL")``.

The matcher may report false positives (a prefix inside a string literal,
say); the extractor makes the final decision. The matcher must never
report a miss for text the extractor would match, which is why the
literals stop short of the opening parenthesis.
"""

import re
from collections.abc import Collection, Iterable

import ahocorasick

from .errors import PatternError

# Call-name prefixes, plain and OS-string variants, under the std path,
# the short `env::` path and the dotenv crate.
ACCESSOR_LITERALS = (
    "std::env::var",
    "env::var",
    "dotenv::var",
    "std::env::var_os",
    "env::var_os",
    "dotenv::var_os",
)

# Argument must be a double-quoted literal with no embedded quote or newline.
# Single quotes, identifiers, format!() and empty argument lists never match.
ACCESSOR_REGEX = r'(?:std::env::var|env::var|dotenv::var)(?:_os)?\s*\(\s*"([^"\n\r]*)"\s*\)'


class LiteralMatcher:
    """Multi-literal substring test backed by an Aho-Corasick automaton."""

    def __init__(self, literals: Iterable[str] = ACCESSOR_LITERALS):
        literals = [lit for lit in literals if lit]
        if not literals:
            raise PatternError("Literal matcher needs at least one non-empty literal")

        automaton = ahocorasick.Automaton()
        for index, literal in enumerate(literals):
            automaton.add_word(literal, (index, literal))
        automaton.make_automaton()

        self.literals = tuple(literals)
        self._automaton = automaton

    def is_match(self, text: str) -> bool:
        """Return True if any literal occurs in text."""
        for _ in self._automaton.iter(text):
            return True
        return False


class Extractor:
    """Capture the string-literal argument of accessor calls."""

    def __init__(self, pattern: str = ACCESSOR_REGEX):
        try:
            self._regex = re.compile(pattern)
        except re.error as e:
            raise PatternError(f"Failed to compile extraction regex {pattern!r}: {e}") from e
        if self._regex.groups < 1:
            raise PatternError(f"Extraction regex {pattern!r} has no capture group")

    def extract(self, text: str) -> list[str]:
        """Return every captured name, left to right, duplicates included."""
        return [m.group(1) for m in self._regex.finditer(text)]


def is_ignored(name: str, ignore: Collection[str]) -> bool:
    """Exact-match membership test; no globbing, no substring matching."""
    return name in ignore

"""Naming strategies for deriving singular names from resource names.

Resource names are plural (``persons``, ``applications``); the compiler needs
the singular form for the object type and the single-item query field. The
default heuristic only knows a few English suffix rules, so the strategy is
pluggable.

Example usage:
    from gql_restgen.core.naming import IrregularNaming

    naming = IrregularNaming({"people": "person", "children": "child"})
    naming.singularize("people")   # "person"
    naming.singularize("queues")   # "queue" (falls back to EnglishNaming)
"""

import re
from collections.abc import Mapping
from typing import Protocol, runtime_checkable


@runtime_checkable
class NamingStrategy(Protocol):
    """Protocol for singularization strategies.

    Example:
        class SameNaming:
            def singularize(self, name: str) -> str:
                return name
    """

    def singularize(self, name: str) -> str:
        """Return the singular form of a plural resource name."""
        ...


class EnglishNaming:
    """Suffix heuristic: ``ies -> y``, sibilant ``es`` dropped, plain ``s`` dropped."""

    _IES = re.compile(r"ies$")
    _SIBILANT_ES = re.compile(r"(ss|x|z|ch|sh)es$")
    _TRAILING_S = re.compile(r"(?<!s)s$")

    def singularize(self, name: str) -> str:
        if not name:
            return ""
        if self._IES.search(name):
            return self._IES.sub("y", name)
        if self._SIBILANT_ES.search(name):
            return name[:-2]
        if self._TRAILING_S.search(name):
            return name[:-1]
        return name


class IrregularNaming:
    """Looks names up in an irregular-noun table before delegating.

    Matching is case-insensitive; a capitalized input yields a capitalized
    result.
    """

    def __init__(self, irregulars: Mapping[str, str], fallback: NamingStrategy | None = None):
        self.irregulars = {plural.lower(): singular for plural, singular in irregulars.items()}
        self.fallback = fallback or EnglishNaming()

    def singularize(self, name: str) -> str:
        singular = self.irregulars.get(name.lower())
        if singular is None:
            return self.fallback.singularize(name)
        if name[:1].isupper():
            return singular[:1].upper() + singular[1:]
        return singular


DEFAULT_NAMING = EnglishNaming()

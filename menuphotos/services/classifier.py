from __future__ import annotations
"""
Keyword classifier for menu item names.

Key points:
- Rules are tested in a fixed priority order; the first match wins
- A rule matches when the lower-cased name contains any keyword and none of its excludes
- No match is a normal outcome (None); the assignment engine falls back to the full pool
- The shipped DEFAULT_RULES mirror config/photo_pool.json; the config file is the source of truth
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from ..errors import ConfigurationError


@dataclass(frozen=True)
class Rule:
    bucket: str
    keywords: Tuple[str, ...]
    exclude: Tuple[str, ...] = ()

    def matches(self, lowered: str) -> bool:
        if not any(k in lowered for k in self.keywords):
            return False
        return not any(x in lowered for x in self.exclude)


def _norm_words(words: Iterable[str], where: str = "rule") -> Tuple[str, ...]:
    # a bare string would be iterated per character
    if isinstance(words, (str, bytes)) or not isinstance(words, Iterable):
        raise ConfigurationError(f"{where}: expected a list of keywords, got {words!r}")
    out = []
    for w in words:
        s = str(w).strip().lower()
        if s:
            out.append(s)
    return tuple(out)


# ---------------------------------------------------------------------
# Default priority list
# ---------------------------------------------------------------------
# Order matters: "Chicken Biryani" hits chicken before rice,
# "Chicken Fried Rice" is excluded from chicken and lands in rice.
DEFAULT_RULES: Tuple[Rule, ...] = (
    Rule("pizza", ("pizza",)),
    Rule("burger", ("burger",)),
    Rule("pasta", ("pasta", "spaghetti", "noodle", "chowmein", "ramen")),
    Rule("kabab", ("kabab", "kebab", "tandoori", "shashlik", "grill", "bbq")),
    Rule("prawn", ("prawn", "lobster")),
    Rule("fish", ("fish", "hilsa", "vetki", "pomfret", "rupchanda")),
    Rule("chicken", ("chicken",), exclude=("fried rice",)),
    Rule("beef", ("beef", "mutton", "khasi")),
    Rule("rice", ("rice", "biryani", "polao", "tehari", "khichuri")),
    Rule("soup", ("soup",)),
    Rule("salad", ("salad",)),
)


class Classifier:
    """Maps a display name to at most one bucket name."""

    def __init__(self, rules: Sequence[Rule] = DEFAULT_RULES):
        self.rules: Tuple[Rule, ...] = tuple(rules)

    def classify(self, name: str) -> Optional[str]:
        s = (name or "").strip().lower()
        if not s:
            return None
        for rule in self.rules:
            if rule.matches(s):
                return rule.bucket
        return None

    __call__ = classify

    @property
    def buckets(self) -> List[str]:
        """Bucket names referenced by the rules, in priority order."""
        seen, out = set(), []
        for r in self.rules:
            if r.bucket not in seen:
                seen.add(r.bucket)
                out.append(r.bucket)
        return out

    def __repr__(self) -> str:
        return f"<Classifier rules={len(self.rules)}>"


_DEFAULT = Classifier()


def classify(name: str, rules: Optional[Sequence[Rule]] = None) -> Optional[str]:
    if rules is None:
        return _DEFAULT.classify(name)
    return Classifier(rules).classify(name)


def rules_from_config(raw: Optional[Iterable[dict]]) -> Tuple[Rule, ...]:
    """
    Build rules from the `rules` list of the pool config:
      [{"bucket": "pizza", "keywords": ["pizza"], "exclude": []}, ...]
    """
    if raw is None:
        return DEFAULT_RULES
    if not isinstance(raw, (list, tuple)):
        raise ConfigurationError(f"rules must be a list, got {type(raw).__name__}")
    rules: List[Rule] = []
    for i, entry in enumerate(raw):
        if not isinstance(entry, dict):
            raise ConfigurationError(f"rule #{i} must be an object, got {type(entry).__name__}")
        bucket = str(entry.get("bucket") or "").strip()
        keywords = _norm_words(entry.get("keywords") or (), f"rule #{i} keywords")
        if not bucket:
            raise ConfigurationError(f"rule #{i} has no bucket")
        if not keywords:
            raise ConfigurationError(f"rule #{i} ({bucket}) has no keywords")
        rules.append(Rule(bucket, keywords, _norm_words(entry.get("exclude") or (), f"rule #{i} exclude")))
    return tuple(rules)

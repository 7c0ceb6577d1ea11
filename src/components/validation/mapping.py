"""
Header mapping suggestions for uploaded sheets whose column names do not
match the game plan template.
"""

import re

from ._impl import COLUMN_ALIASES, EXPECTED_COLUMNS
from .models import FieldMappingSuggestion

SIMILARITY_THRESHOLD = 0.6

KNOWN_VARIATIONS: dict[str, tuple[str, ...]] = {
    "Category": ("categories", "product category", "cat"),
    "Range": ("product range", "ranges", "sub brand"),
    "Campaign": ("campaign name", "campaigns"),
    "Playbook ID": ("playbook", "playbook id", "playbookid"),
    "Campaign Archetype": ("archetype", "campaign type"),
    "Media": ("media type", "channel"),
    "Media Subtype": ("media sub type", "media sub-type", "subtype", "sub channel"),
    "Initial Date": ("start date", "start", "from date", "begin date"),
    "End Date": ("end", "to date", "finish date"),
    "Total Weeks": ("weeks", "number of weeks"),
    "Total Budget": ("budget", "total spend", "spend"),
    "Total WOA": ("woa", "weeks on air"),
    "Total WOFF": ("woff", "weeks off air", "w off air"),
    "Total TRPs": ("trps", "trp", "grps"),
    "Total R1+ (%)": ("r1+", "total r1+", "reach 1+", "reach1+"),
    "Total R3+ (%)": ("r3+", "total r3+", "reach 3+", "reach3+"),
}


def _normalise(header: str) -> str:
    return re.sub(r"\s+", " ", header.strip().lower())


def _tokens(text: str) -> set[str]:
    return set(re.findall(r"[a-z0-9+%]+", text.lower()))


def jaccard(a: str, b: str) -> float:
    ta, tb = _tokens(a), _tokens(b)
    if not ta or not tb:
        return 0.0
    return len(ta & tb) / len(ta | tb)


def _known_headers() -> set[str]:
    known = {_normalise(c) for c in EXPECTED_COLUMNS}
    for aliases in COLUMN_ALIASES.values():
        known |= {_normalise(a) for a in aliases}
    return known


def suggest_field_mappings(headers: list[str]) -> list[FieldMappingSuggestion]:
    """
    Suggest template columns for headers that are not recognised.

    Order of preference: case-insensitive exact match, a known variation,
    then token similarity above the threshold.
    """
    known = _known_headers()
    suggestions: list[FieldMappingSuggestion] = []

    for header in headers:
        norm = _normalise(header)
        if header in EXPECTED_COLUMNS or any(header in a for a in COLUMN_ALIASES.values()):
            continue

        exact = [c for c in EXPECTED_COLUMNS if _normalise(c) == norm]
        if exact:
            suggestions.append(FieldMappingSuggestion(header, exact, "exact"))
            continue
        if norm in known:
            continue

        variations = [col for col, names in KNOWN_VARIATIONS.items() if norm in names]
        if variations:
            suggestions.append(FieldMappingSuggestion(header, variations, "variation"))
            continue

        scored = sorted(
            ((jaccard(header, col), col) for col in EXPECTED_COLUMNS),
            key=lambda pair: pair[0],
            reverse=True,
        )
        similar = [col for score, col in scored if score > SIMILARITY_THRESHOLD]
        suggestions.append(
            FieldMappingSuggestion(header, similar, "similar" if similar else "none")
        )

    return suggestions

"""
Lexical similarity between a domain and a reference word (usually a brand).
"""

# Digit/symbol swaps commonly seen in typosquatted labels
HOMOGLYPH_SUBSTITUTIONS = {
    '0': 'o',
    '1': 'l',
    '3': 'e',
    '4': 'a',
    '5': 's',
    '7': 't',
    '8': 'b',
    '@': 'a',
    '$': 's',
}

MAX_EDIT_DISTANCE = 2


def levenshtein_distance(s1: str, s2: str) -> int:
    """Calculate Levenshtein distance between two strings"""
    if len(s1) < len(s2):
        return levenshtein_distance(s2, s1)
    if len(s2) == 0:
        return len(s1)

    previous_row = range(len(s2) + 1)
    for i, c1 in enumerate(s1):
        current_row = [i + 1]
        for j, c2 in enumerate(s2):
            insertions = previous_row[j + 1] + 1
            deletions = current_row[j] + 1
            substitutions = previous_row[j] + (c1 != c2)
            current_row.append(min(insertions, deletions, substitutions))
        previous_row = current_row
    return previous_row[-1]


def second_level_label(domain: str) -> str:
    """
    Label immediately left of the last dot ('paypal' for 'www.paypal.com').
    Domains without a dot are returned whole.
    """
    parts = domain.split('.')
    if len(parts) < 2:
        return domain
    return parts[-2] or domain


def undo_homoglyphs(label: str) -> str:
    return ''.join(HOMOGLYPH_SUBSTITUTIONS.get(c, c) for c in label)


def similar(candidate: str, reference: str) -> bool:
    """
    True when the second-level label of `candidate` looks like `reference`.

    Matches on containment (also after undoing digit homoglyphs, so
    'paypa1-secure' counts for 'paypal') or on an edit distance of at most 2.
    Comparison is case-sensitive; callers lowercase beforehand.
    """
    label = second_level_label(candidate)
    if reference in label:
        return True
    if reference in undo_homoglyphs(label):
        return True
    return levenshtein_distance(label, reference) <= MAX_EDIT_DISTANCE


__all__ = [
    'levenshtein_distance',
    'second_level_label',
    'undo_homoglyphs',
    'similar',
]

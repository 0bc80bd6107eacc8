"""
inventory_engines.levenshtein -- Edit distance between two strings.

Callers normalize (case-fold, trim) before calling; this function counts
every character difference, cosmetic or not.
"""


def levenshtein_distance(a: str, b: str) -> int:
    """
    Minimum number of single-character insertions, deletions or
    substitutions that turn ``a`` into ``b``.

    Full ``(len(a)+1) x (len(b)+1)`` table; O(len(a) * len(b)) time and space.

    >>> levenshtein_distance("kitten", "sitting")
    3
    """
    m, n = len(a), len(b)
    if m == 0:
        return n
    if n == 0:
        return m

    table = [[0] * (n + 1) for _ in range(m + 1)]
    for i in range(m + 1):
        table[i][0] = i
    for j in range(n + 1):
        table[0][j] = j

    for i in range(1, m + 1):
        for j in range(1, n + 1):
            cost = 0 if a[i - 1] == b[j - 1] else 1
            table[i][j] = min(
                table[i - 1][j] + 1,  # delete
                table[i][j - 1] + 1,  # insert
                table[i - 1][j - 1] + cost,  # substitute
            )

    return table[m][n]

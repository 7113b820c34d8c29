"""Summary statistics over a ranked comparison.

Pure Decimal reductions. An empty comparison has nothing to summarize and
yields None rather than NaN-filled statistics.
"""

from decimal import Decimal

from funding_compare.models import ComparisonResult, SummaryStatistics

DEFAULT_MATERIALITY_THRESHOLD = Decimal("0.01")


def summarize(
    result: ComparisonResult,
    threshold: Decimal = DEFAULT_MATERIALITY_THRESHOLD,
) -> SummaryStatistics | None:
    """Reduce matched pairs to count, mean, max, min and material count.

    Args:
        result: Ranked matched pairs.
        threshold: Spread (same units as ``difference``) above which a pair
            counts as a material discrepancy. The comparison is strict.

    Returns:
        SummaryStatistics, or None when ``result`` is empty.
    """
    if result.is_empty:
        return None

    differences = [p.difference for p in result]
    count = len(differences)

    return SummaryStatistics(
        count=count,
        mean=sum(differences, Decimal("0")) / Decimal(count),
        maximum=max(differences),
        minimum=min(differences),
        material_count=material_count(result, threshold),
        threshold=threshold,
    )


def material_count(result: ComparisonResult, threshold: Decimal) -> int:
    """Number of pairs whose absolute spread exceeds ``threshold``."""
    return sum(1 for p in result if p.is_material(threshold))

"""Quality control summaries for gene annotations."""

from gtetools.qc.stats import AnnotationStats, LengthSummary, collect_stats

__all__ = ["AnnotationStats", "LengthSummary", "collect_stats"]

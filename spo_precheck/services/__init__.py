from .batch_runner import BatchPreCheckRunner
from .report_aggregator import ReportAggregator
from .url_normalization import UrlNormalizer, SiteUrlNormalizer

__all__ = [
    "BatchPreCheckRunner",
    "ReportAggregator",
    "UrlNormalizer",
    "SiteUrlNormalizer",
]

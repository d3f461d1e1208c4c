"""Spot processing package.

The structure is:
- models.py: Report dataclass and identity key
- bands.py: Band and mode classification
- signal.py: SNR classification for path rendering
- callsign_info.py: Prefix-based callsign metadata resolver
- filters.py: Filter criteria and predicates
- aggregator.py: Retained spot set with dedup, eviction and capacity bound
- stats.py: Activity summary
- formatters.py: Display formatting
"""

from .models import Report, report_key
from .bands import band_from_frequency, detect_mode
from .signal import SignalBand, classify_snr
from .callsign_info import CallsignInfo, CallsignResolver, PrefixResolver
from .filters import FilterConfig, filter_reports, matches
from .aggregator import SpotAggregator, SpotView
from .stats import ActivitySummary, summarize
from .formatters import SpotFormatters

__all__ = [
    # Data model
    'Report', 'report_key',

    # Classifiers
    'band_from_frequency', 'detect_mode', 'SignalBand', 'classify_snr',

    # Callsign metadata
    'CallsignInfo', 'CallsignResolver', 'PrefixResolver',

    # Filtering and aggregation
    'FilterConfig', 'filter_reports', 'matches', 'SpotAggregator', 'SpotView',

    # Presentation
    'ActivitySummary', 'summarize', 'SpotFormatters',
]

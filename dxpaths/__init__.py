"""DX paths: aggregation of amateur-radio propagation spots.

Fetches spots from reporting networks (DX cluster relay, PSKReporter, WSPR),
keeps a deduplicated, retention-windowed working set and exposes filtered
list and great-circle path views of it.
"""

from dxpaths.constants import VERSION

__version__ = VERSION

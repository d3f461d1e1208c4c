"""Spot source adapters.

Each source fetches raw batches from one reporting network through the
spot relay server and hands back canonical raw records for the aggregator.
"""

from dxpaths.sources.base import SpotSource
from dxpaths.sources.dxcluster import DXClusterSource
from dxpaths.sources.pskreporter import PSKReporterSource
from dxpaths.sources.wspr import WSPRSource

SOURCES = {
    DXClusterSource.name: DXClusterSource,
    PSKReporterSource.name: PSKReporterSource,
    WSPRSource.name: WSPRSource,
}

__all__ = ['SpotSource', 'DXClusterSource', 'PSKReporterSource', 'WSPRSource', 'SOURCES']

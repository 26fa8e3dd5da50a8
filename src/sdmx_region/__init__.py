from importlib.metadata import PackageNotFoundError, version

from sdmx_region.controller import LoadState, SdmxRegionCatalogItem
from sdmx_region.pipeline.stages import build_metadata_catalogue, build_region_table

try:
    __version__ = version("sdmx-region-table")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0"

__all__ = [
    "LoadState",
    "SdmxRegionCatalogItem",
    "__version__",
    "build_metadata_catalogue",
    "build_region_table",
]

from __future__ import annotations

from enum import Enum
from urllib.parse import urlsplit, urlunsplit

DATA_SEGMENT = "data"
DATAFLOW_SEGMENT = "dataflow"
DEFAULT_AGENCY = "all"


class Topology(str, Enum):
    DIRECT_DATA = "direct_data"
    METADATA_FIRST = "metadata_first"


def clean_url(url: str) -> str:
    """Strip the query string and fragment before proxying."""
    parts = urlsplit(url)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))


def proxy_url(url: str, proxy: str | None) -> str:
    if not proxy:
        return url
    return f"{proxy.rstrip('/')}/{url}"


def _path_segments(url: str) -> list[str]:
    return [segment for segment in urlsplit(url).path.split("/") if segment]


def _data_segment_index(segments: list[str]) -> int | None:
    for index in range(len(segments) - 1, -1, -1):
        if segments[index] == DATA_SEGMENT:
            return index
    return None


def detect_topology(url: str) -> Topology:
    """``.../data/<dataset>`` with nothing after it only names a dataflow.

    Anything further (a filter expression, an agency) means the URL already
    points at observation data.
    """
    segments = _path_segments(url)
    index = _data_segment_index(segments)
    if index is not None and len(segments) - index - 1 == 1:
        return Topology.METADATA_FIRST
    return Topology.DIRECT_DATA


def _replace_path(url: str, segments: list[str]) -> str:
    parts = urlsplit(clean_url(url))
    trailing = "/".join(segments)
    return urlunsplit((parts.scheme, parts.netloc, f"/{trailing}", "", ""))


def dataflow_url(url: str) -> str:
    segments = _path_segments(url)
    index = _data_segment_index(segments)
    if index is None or index + 1 >= len(segments):
        raise ValueError(f"URL does not name a dataset after '/{DATA_SEGMENT}/': {url}")
    return _replace_path(url, segments[:index] + [DATAFLOW_SEGMENT, segments[index + 1]])


def data_url(url: str, filter_expression: str, agency: str = DEFAULT_AGENCY) -> str:
    segments = _path_segments(url)
    index = _data_segment_index(segments)
    if index is None or index + 1 >= len(segments):
        raise ValueError(f"URL does not name a dataset after '/{DATA_SEGMENT}/': {url}")
    dataset_segments = segments[: index + 2]
    return _replace_path(url, dataset_segments + [filter_expression, agency or DEFAULT_AGENCY])

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping

import requests

LOGGER = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_HEADERS = {
    "Accept": "application/json, text/javascript, */*; q=0.01",
}

JsonFetcher = Callable[[str], Mapping[str, Any]]


class FetchError(RuntimeError):
    def __init__(self, url: str, message: str) -> None:
        super().__init__(f"{message} ({url})")
        self.url = url


def fetch_json(
    url: str,
    *,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    user_agent: str | None = None,
    session: requests.Session | None = None,
) -> Mapping[str, Any]:
    headers = dict(DEFAULT_HEADERS)
    if user_agent:
        headers["User-Agent"] = user_agent
    getter = session.get if session is not None else requests.get
    LOGGER.info("Fetching %s", url)
    try:
        response = getter(url, headers=headers, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as exc:
        raise FetchError(url, f"request failed: {exc}") from exc
    try:
        payload = response.json()
    except ValueError as exc:
        raise FetchError(url, "response is not valid JSON") from exc
    if not isinstance(payload, Mapping):
        raise FetchError(url, "response JSON must be an object")
    return payload


def build_fetcher(
    *,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    user_agent: str | None = None,
) -> JsonFetcher:
    session = requests.Session()

    def fetch(url: str) -> Mapping[str, Any]:
        return fetch_json(url, timeout=timeout, user_agent=user_agent, session=session)

    return fetch

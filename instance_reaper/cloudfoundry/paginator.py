"""
Paginated Collection Fetcher
============================

Follows ``next_url`` links of v2 list responses until the collection is
exhausted, either eagerly or as a background stream.

Functions
---------
iter_pages
    Generator of pages, fetched one after the other.
fetch_all
    Every item of every page, as one list.
fetch_streaming
    Items pushed onto a bounded channel by a background thread.

Each function takes ``get_json``, a callable fetching one endpoint and
returning its decoded JSON document (raising :class:`CloudFoundryError`
on failure), and ``parse``, which turns one resource into a model.

Example
-------
>>> plans = fetch_all(client.get_json, endpoint, ServicePlan.from_dict)
>>>
>>> items, errors = fetch_streaming(
...     client.get_json, endpoint, ServiceInstance.from_dict, buffer_size=50
... )
>>> for instance in items:
...     print(instance.name)
>>> for error in errors:
...     print(f"stream failed: {error}")

Notes
-----
The API guarantees that ``next_url`` always points further into the
collection; cycles are not detected.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Iterator, List, Tuple, TypeVar

from instance_reaper.cloudfoundry.models import Page, ResourceFormatError
from instance_reaper.core.channel import Channel
from instance_reaper.core.exceptions import CloudFoundryError, MalformedResponseError

# Module logger
logger = logging.getLogger(__name__)

T = TypeVar("T")

GetJson = Callable[[str], Any]
Parse = Callable[[Any], T]


def iter_pages(get_json: GetJson, endpoint: str, parse: Parse) -> Iterator[Page[T]]:
    """
    Yield each page of a collection, starting at ``endpoint``.

    Parameters
    ----------
    get_json : callable
        Fetches one endpoint and returns its JSON document.
    endpoint : str
        First page of the collection.
    parse : callable
        Builds one item from one resource.

    Yields
    ------
    Page
        Pages in collection order.

    Raises
    ------
    CloudFoundryError
        If a page cannot be fetched or does not have the expected shape.
    """
    next_endpoint = endpoint
    page_number = 0
    while next_endpoint:
        document = get_json(next_endpoint)
        try:
            page = Page.from_dict(document, parse)
        except ResourceFormatError as e:
            raise MalformedResponseError(
                f"invalid GET {next_endpoint} response JSON: {e}",
                endpoint=next_endpoint,
            ) from e

        page_number += 1
        logger.debug(
            f"Fetched page {page_number} of {endpoint} ({len(page.items)} items)"
        )
        yield page
        next_endpoint = page.next_page_token


def fetch_all(get_json: GetJson, endpoint: str, parse: Parse) -> List[T]:
    """
    Fetch a whole collection before returning.

    Returns
    -------
    list
        Items of every page, in page order.

    Raises
    ------
    CloudFoundryError
        On the first page that fails; items fetched so far are discarded.
    """
    items: List[T] = []
    for page in iter_pages(get_json, endpoint, parse):
        items.extend(page.items)
    return items


def fetch_streaming(
    get_json: GetJson,
    endpoint: str,
    parse: Parse,
    buffer_size: int,
) -> Tuple[Channel, Channel]:
    """
    Stream a collection from a background thread.

    Parameters
    ----------
    get_json : callable
        Fetches one endpoint and returns its JSON document.
    endpoint : str
        First page of the collection.
    parse : callable
        Builds one item from one resource.
    buffer_size : int
        Capacity of the item channel. Equal to the page size, so that
        one page never blocks the fetch of the next.

    Returns
    -------
    tuple
        (item channel, error channel). The item channel is closed when
        the collection is exhausted or a fetch fails. The error channel
        holds at most one :class:`CloudFoundryError` and is closed
        after the item channel. A consumer that stops early discards
        both channels; no further pages are then fetched.
    """
    items: Channel = Channel(maxsize=buffer_size)
    errors: Channel = Channel(maxsize=1)

    def produce() -> None:
        try:
            for page in iter_pages(get_json, endpoint, parse):
                for item in page.items:
                    items.put(item)
                if items.discarded:
                    logger.debug(f"Stream of {endpoint} discarded by its consumer")
                    break
        except CloudFoundryError as e:
            logger.debug(f"Stream of {endpoint} failed: {e}")
            errors.put(e)
        finally:
            items.close()
            errors.close()

    thread = threading.Thread(
        target=produce,
        name=f"fetch-{endpoint.split('?')[0]}",
        daemon=True,
    )
    thread.start()
    return items, errors

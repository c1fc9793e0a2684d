"""
Paginated aggregation for the upstream offset/limit list endpoints.

The insight APIs answer list queries one page at a time. When a caller asks
for everything (``get_all=true``) the handler fetches page one itself and
hands it to ``aggregate``, which fetches the remaining pages in offset order
and merges one named array field into a single envelope.
"""

import math
from typing import Any, Callable, Dict, List

from aws_lambda_powertools.metrics import MetricUnit

from devportal.handlers.utils.errors import LimitExceededError, PageFetchError, UpstreamCallError
from devportal.handlers.utils.observability import logger, metrics, tracer
from devportal.models.page import PageMeta

PageEnvelope = Dict[str, Any]
PageFetcher = Callable[[int], PageEnvelope]


def _page_items(page: Any, field_name: str) -> List[Any]:
    if not isinstance(page, dict):
        return []
    data = page.get('data')
    if not isinstance(data, dict):
        return []
    return data.get(field_name) or []


@tracer.capture_method(capture_response=False)
def aggregate(
    fetch_page: PageFetcher,
    first_page: PageEnvelope,
    field_name: str,
    max_total: int,
    get_all: bool = True,
) -> PageEnvelope:
    """
    Merge every page of a paged list into one envelope.

    Args:
        fetch_page: Fetches the page starting at the given offset
        first_page: Page one, already fetched by the caller
        field_name: Array field under ``data`` to merge (e.g. ``port_calls``)
        max_total: Ceiling on ``meta.total_count``
        get_all: Whether the caller asked for aggregation at all

    Returns:
        ``first_page`` itself when no further page is needed, otherwise a new
        envelope equal to ``first_page`` with ``data[field_name]`` holding all
        items in offset order. ``meta`` is passed through unchanged.

    Raises:
        LimitExceededError: ``total_count`` exceeds ``max_total``; nothing is fetched
        PageFetchError: One of the additional fetches failed; nothing is merged
    """
    meta = PageMeta.model_validate(first_page.get('meta') or {})

    if not get_all or not meta.is_paginated:
        return first_page

    total_count = meta.total_count
    limit = meta.limit

    if total_count > max_total:
        logger.warning('Aggregation refused, record ceiling exceeded', extra={
            'total_count': total_count,
            'max_total': max_total,
            'field_name': field_name,
        })
        metrics.add_metric(name='AggregationLimitExceeded', unit=MetricUnit.Count, value=1)
        raise LimitExceededError(total_count=total_count, max_total=max_total)

    if total_count <= limit:
        return first_page

    request_count = math.ceil(total_count / limit) - 1
    logger.info('Aggregating additional pages', extra={
        'field_name': field_name,
        'total_count': total_count,
        'limit': limit,
        'request_count': request_count,
    })

    # Built apart from first_page so a failed fetch leaves it untouched
    items = list(_page_items(first_page, field_name))
    for page_number in range(1, request_count + 1):
        offset = page_number * limit
        try:
            page = fetch_page(offset)
        except UpstreamCallError as e:
            logger.error('Page fetch failed, aggregation aborted', extra={
                'field_name': field_name,
                'offset': offset,
                'status_code': e.status_code,
            })
            raise PageFetchError(offset=offset, cause=e) from e
        items.extend(_page_items(page, field_name))

    metrics.add_metric(name='AdditionalPagesFetched', unit=MetricUnit.Count, value=request_count)
    tracer.put_annotation('aggregated_items', len(items))

    merged = dict(first_page)
    merged['data'] = {**(first_page.get('data') or {}), field_name: items}
    return merged

"""Page-index pagination for the tenant list endpoints."""

import logging
from typing import Any, Optional

from pydantic import ValidationError

from models.training_unit import Paging

logger = logging.getLogger(__name__)


def paginate(
    client,
    endpoint: str,
    items_key: str,
    page_size: int,
    params: Optional[dict[str, Any]] = None,
) -> list[dict]:
    """Requests pages 1, 2, ... and concatenates ``items_key`` from each.

    Stops when ``paging.HasNextPage`` is absent or false. A failed, empty or
    ``success: false`` page also stops the loop; whatever was collected
    until then is returned. Never raises.
    """
    items: list[dict] = []
    page = 1
    while True:
        query = dict(params or {})
        query.update({"page": page, "pageSize": page_size})
        data = client.request(endpoint, "GET", params=query)

        if not data or not isinstance(data, dict) or data.get("success") is False:
            if page == 1:
                logger.warning(f"{endpoint}: no data on page 1")
            else:
                logger.warning(
                    f"{endpoint}: page {page} failed, keeping {len(items)} items")
            break

        page_items = data.get(items_key) or []
        items.extend(page_items)

        try:
            paging = Paging.model_validate(data.get("paging") or {})
        except ValidationError:
            break
        if not paging.has_next_page:
            break
        page += 1

    logger.debug(f"{endpoint}: {len(items)} items on {page} page(s)")
    return items

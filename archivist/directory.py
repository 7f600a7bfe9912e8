"""
Exclusion directory - channels exempt from the inactivity sweep.

The directory is an external read-only JSON endpoint returning a list of
records. Each record carries a channel ID either inside an Airtable-style
``fields`` object or at the top level.
"""

import logging
from typing import FrozenSet, Optional

import httpx

from .errors import DirectoryFetchError

logger = logging.getLogger(__name__)


def fetch_exclusion_set(
    url: Optional[str],
    field: str,
    timeout: float = 10.0,
) -> FrozenSet[str]:
    """
    Fetch the set of channel IDs exempt from sweeping.

    Args:
        url: Directory endpoint; None means nothing is excluded
        field: Record field that holds the channel ID
        timeout: Request timeout in seconds

    Returns:
        Frozen set of channel IDs

    Raises:
        DirectoryFetchError: on transport errors, HTTP errors or a malformed body
    """
    if not url:
        logger.info("No exclusion directory configured, nothing is excluded")
        return frozenset()

    try:
        with httpx.Client(timeout=timeout) as client:
            response = client.get(url)
            response.raise_for_status()
            records = response.json()
    except httpx.HTTPError as e:
        raise DirectoryFetchError(f"Could not fetch exclusion directory: {e}") from e
    except ValueError as e:
        raise DirectoryFetchError(f"Exclusion directory returned invalid JSON: {e}") from e

    if not isinstance(records, list):
        raise DirectoryFetchError(
            f"Exclusion directory returned {type(records).__name__}, expected a list"
        )

    channel_ids = set()
    for record in records:
        if not isinstance(record, dict):
            continue
        fields = record.get("fields")
        channel_id = fields.get(field) if isinstance(fields, dict) else record.get(field)
        if channel_id:
            channel_ids.add(channel_id)

    logger.debug(f"Loaded {len(channel_ids)} excluded channels")
    return frozenset(channel_ids)

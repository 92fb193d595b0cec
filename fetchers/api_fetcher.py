"""Fetcher that reads posts and pages from the WordPress REST API."""

import logging
from typing import Any, Dict, List, Optional

from models import ItemKind, RemoteItem
from .base_fetcher import BaseFetcher
from .wordpress_client import WordPressClient


class ApiFetcher(BaseFetcher):
    """
    Retrieves WordPress collections and turns them into RemoteItem objects.

    Only the first page of each collection is requested. A site with more
    items than ``per_page`` is reported with a warning; the rest are not
    fetched.
    """

    def __init__(
        self,
        config: Dict[str, Any],
        client: Optional[WordPressClient] = None,
        logger: Optional[logging.Logger] = None
    ):
        super().__init__(config, logger)
        self.client = client or WordPressClient.from_config(config)
        self.per_page = config.get('wordpress', {}).get('per_page', 100)

    def build_params(self, kind: ItemKind) -> Dict[str, Any]:
        """Query parameters for one collection request."""
        params: Dict[str, Any] = {'per_page': self.per_page}
        if kind == ItemKind.POSTS:
            # Embeds the featured media object into each post
            params['_embed'] = 1
        return params

    def fetch_items(self, kind: ItemKind) -> List[RemoteItem]:
        self._log_progress(f"Fetching {kind.value} from WordPress...")

        raw_items = self.client.get_collection(kind.value, params=self.build_params(kind))

        items = []
        for data in raw_items:
            if not isinstance(data, dict) or not data.get('slug'):
                self.logger.warning(f"Skipping {kind.value[:-1]} without a slug (id={_item_id(data)})")
                continue
            items.append(RemoteItem.from_api(data, kind))

        total = getattr(self.client, 'last_total', None)
        if isinstance(total, int) and total > len(raw_items):
            self.logger.warning(
                f"Site reports {total} {kind.value} but only the first {len(raw_items)} were fetched"
            )

        self._log_progress(f"Found {len(items)} {kind.value}")
        return items


def _item_id(data: Any) -> Any:
    return data.get('id') if isinstance(data, dict) else None

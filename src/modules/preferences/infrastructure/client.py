"""Composition root for the local-first client."""

from dataclasses import dataclass
from pathlib import Path

import httpx

from src.core.config import settings
from src.modules.aggregation.infrastructure.feed_client import (
    AggregatedFeed,
    HttpAggregatedFeedClient,
)
from src.modules.preferences.application.credentials import CredentialStore
from src.modules.preferences.application.presentation import GroupExpansionStore
from src.modules.preferences.application.store import LocalConfigurationStore
from src.modules.preferences.application.sync_engine import SyncEngine
from src.modules.preferences.application.views import ViewMutationFacade
from src.modules.preferences.domain.ports import DurableStorage, SyncNotifier
from src.modules.preferences.infrastructure.storage import JsonFileStorage
from src.modules.preferences.infrastructure.sync_gateway import HttpSyncGateway
from src.modules.sources.domain.catalog import SourceCatalog


@dataclass
class ClientSession:
    """Everything a client UI needs, wired around one store."""

    store: LocalConfigurationStore
    credentials: CredentialStore
    sync: SyncEngine
    views: ViewMutationFacade
    groups: GroupExpansionStore
    feed: HttpAggregatedFeedClient

    async def load_category_feed(
        self, category: str, force_fresh: bool = False
    ) -> AggregatedFeed:
        return await self.feed.fetch(self.store.effective_sources(category), force_fresh)

    async def load_active_view_feed(self, force_fresh: bool = False) -> AggregatedFeed | None:
        sources = self.views.sources_for_aggregation()
        if not sources:
            return None
        return await self.feed.fetch(sources, force_fresh)

    async def close(self) -> None:
        await self.sync.close()


def open_client_session(
    catalog: SourceCatalog,
    *,
    storage: DurableStorage | None = None,
    storage_path: Path | None = None,
    base_url: str | None = None,
    notifier: SyncNotifier | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ClientSession:
    """Build and start a client session; must run inside an event loop."""
    storage = storage or JsonFileStorage(storage_path)
    base_url = base_url or settings.CLIENT_API_BASE_URL

    store = LocalConfigurationStore.load(storage, catalog)
    credentials = CredentialStore(storage)
    sync = SyncEngine(
        store,
        HttpSyncGateway(base_url=base_url, transport=transport),
        credentials,
        notifier,
    )
    session = ClientSession(
        store=store,
        credentials=credentials,
        sync=sync,
        views=ViewMutationFacade(store),
        groups=GroupExpansionStore(storage),
        feed=HttpAggregatedFeedClient(
            credentials.get, base_url=base_url, transport=transport
        ),
    )
    sync.start()
    return session

"""
Application wiring for mindtutor.

create_tutor() builds every runtime component from Settings and hands back one
Tutor bundle; entry points own it for their lifetime.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from mindtutor.classroom import (
    CatalogLoader,
    KeyValueStore,
    Navigator,
    ProgressStore,
    SqliteStore,
)
from mindtutor.config import Settings
from mindtutor.generation import GenerationCache, GenerationClient, TutorContentService


logger = logging.getLogger(__name__)


@dataclass
class Tutor:
    settings: Settings
    store: KeyValueStore
    progress: ProgressStore
    catalog: CatalogLoader
    cache: GenerationCache
    client: GenerationClient
    content: TutorContentService
    navigator: Navigator


def create_tutor(settings: Settings, store: Optional[KeyValueStore] = None) -> Tutor:
    """
    Build a Tutor from settings.

    Args:
        settings: Runtime settings
        store: Key-value backend (default: SqliteStore at settings.db_path,
            namespaced by student id)

    Returns:
        Wired Tutor bundle
    """
    if store is None:
        store = SqliteStore(settings.db_path, namespace=settings.student_id)

    def token_provider() -> Optional[str]:
        return settings.token

    progress = ProgressStore(store)
    catalog = CatalogLoader(
        settings.api_base_url,
        token_provider=token_provider,
        timeout=settings.request_timeout,
    )
    cache = GenerationCache(store)
    client = GenerationClient(
        settings.api_base_url,
        token_provider=token_provider,
        skip_auth=settings.dev_skip_auth,
        timeout=settings.request_timeout,
    )

    logger.debug(f"Tutor ready for {settings.student_id} at {settings.api_base_url}")
    return Tutor(
        settings=settings,
        store=store,
        progress=progress,
        catalog=catalog,
        cache=cache,
        client=client,
        content=TutorContentService(cache, client),
        navigator=Navigator(catalog, progress, unlock_all=settings.dev_unlock_all_lessons),
    )

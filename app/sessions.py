from __future__ import annotations

import logging
from collections import OrderedDict
from pathlib import Path
from typing import Any, Optional

import httpx

from config.settings import Settings, get_settings
from curator.core.local_store import JsonFileLocalStore, LocalStore, MemoryLocalStore
from curator.generation import ContentGenerationClient
from curator.shell import Shell
from curator.store import GalleryStore


logger = logging.getLogger(__name__)


class ShellRegistry:
    """Keeps one ``Shell`` per browser, keyed by the client id it sends.

    At most ``settings.max_clients`` clients are held. The least recently
    used one is released when a new client would go over that number.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        generator: Optional[Any] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or get_settings()
        self.generator = generator or ContentGenerationClient(self.settings)
        self.transport = transport
        self.max_clients = max(1, self.settings.max_clients)
        self._shells: "OrderedDict[str, Shell]" = OrderedDict()
        self._local_stores: "OrderedDict[str, LocalStore]" = OrderedDict()

    def local_store_for(self, client_id: str) -> LocalStore:
        store = self._local_store(client_id)
        self._evict()
        return store

    def _local_store(self, client_id: str) -> LocalStore:
        store = self._local_stores.get(client_id)
        if store is None:
            if self.settings.local_store_dir:
                store = JsonFileLocalStore(Path(self.settings.local_store_dir), client_id)
            else:
                store = MemoryLocalStore()
            self._local_stores[client_id] = store
        self._local_stores.move_to_end(client_id)
        return store

    def get(self, client_id: str, client_marker: str = "") -> Shell:
        shell = self._shells.get(client_id)
        if shell is None:
            store = GalleryStore(
                self._local_store(client_id), self.settings, transport=self.transport
            )
            shell = Shell(
                self.generator,
                store,
                client_marker=client_marker,
                generation_timeout=self.settings.generation_timeout,
            )
            self._shells[client_id] = shell
            logger.info("New shell for client_id=%s has_history=%s", client_id, shell.context.has_history)
        elif client_id in self._local_stores:
            self._local_stores.move_to_end(client_id)
        self._shells.move_to_end(client_id)
        self._evict()
        return shell

    def _evict(self) -> None:
        while len(self._shells) > self.max_clients:
            client_id, shell = self._shells.popitem(last=False)
            self._local_stores.pop(client_id, None)
            shell.release()
            logger.info("Released shell for client_id=%s", client_id)
        # A store still backing a live shell is never dropped on its own.
        orphans = [cid for cid in self._local_stores if cid not in self._shells]
        while len(self._local_stores) > self.max_clients and orphans:
            self._local_stores.pop(orphans.pop(0))

    def __contains__(self, client_id: str) -> bool:
        return client_id in self._shells

    def __len__(self) -> int:
        return len(self._shells)

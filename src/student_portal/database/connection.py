from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from pymongo import MongoClient
from pymongo.database import Database


@dataclass
class MongoConfig:
    uri: str
    database: str
    timeout_ms: int = 3000


class MongoConnection:
    """Lazily created MongoClient.

    Note: MongoClient keeps its own connection pool and is safe to share across
    request threads, so the container builds one per app and closes it on exit.
    """

    def __init__(self, config: MongoConfig, *, event_listeners: Sequence = ()):
        self._config = config
        self._event_listeners = list(event_listeners)
        self._client: Optional[MongoClient] = None

    @property
    def config(self) -> MongoConfig:
        return self._config

    def client(self) -> MongoClient:
        if self._client is None:
            self._client = MongoClient(
                self._config.uri,
                serverSelectionTimeoutMS=int(self._config.timeout_ms),
                connectTimeoutMS=int(self._config.timeout_ms),
                tz_aware=True,
                event_listeners=self._event_listeners,
            )
        return self._client

    def database(self) -> Database:
        return self.client()[self._config.database]

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

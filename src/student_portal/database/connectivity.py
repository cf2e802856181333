from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Optional

from pymongo import monitoring

from ..accounts.repository import AccountRepository
from ..core.exceptions import UnavailableError

logger = logging.getLogger(__name__)


class ConnectivityState:
    """Which account backend requests should use right now.

    Holds the persistent (MongoDB) backend and the in-memory fallback. Services
    go through ``accounts``, which follows ``current()`` and drops to memory as
    soon as MongoDB fails mid-request. Topology events flip ``online``.

    ``on_connect`` runs once, before the first switch to MongoDB (index setup).
    If it fails the state stays on memory and the next switch retries it.
    Switching back to MongoDB does not copy over what was written to memory
    during the outage.
    """

    def __init__(
        self,
        fallback: AccountRepository,
        primary: Optional[AccountRepository] = None,
        *,
        online: bool = False,
        on_connect: Optional[Callable[[], None]] = None,
    ):
        self._fallback = fallback
        self._primary = primary
        self._on_connect = on_connect
        self._connected_once = on_connect is None
        self._online = False
        self._lock = threading.Lock()
        self._setup_lock = threading.Lock()
        self.accounts = FailoverAccountRepository(self)
        if online:
            self.mark_online()

    @property
    def online(self) -> bool:
        return self._online

    @property
    def fallback(self) -> AccountRepository:
        return self._fallback

    def current(self) -> AccountRepository:
        if self._online and self._primary is not None:
            return self._primary
        return self._fallback

    def describe(self) -> str:
        return "connected" if self._online else "memory"

    def mark_online(self) -> None:
        if self._primary is None or self._online:
            return
        if not self._run_on_connect():
            return
        with self._lock:
            if self._online:
                return
            self._online = True
        logger.info("MongoDB connection: connected, using persistent storage")

    def mark_offline(self, reason: str = "") -> None:
        with self._lock:
            if not self._online:
                return
            self._online = False
        logger.warning(
            "MongoDB connection lost (%s), continuing with in-memory storage; "
            "records written meanwhile are not migrated back",
            reason or "unknown",
        )

    def _run_on_connect(self) -> bool:
        if self._connected_once:
            return True
        with self._setup_lock:
            if self._connected_once:
                return True
            try:
                self._on_connect()
            except UnavailableError as exc:
                logger.warning("MongoDB setup failed (%s), staying on in-memory storage", exc)
                return False
            self._connected_once = True
        return True


class FailoverAccountRepository(AccountRepository):
    """AccountRepository that retries on the in-memory backend when MongoDB drops.

    A connectivity failure from the primary marks the state offline before the
    heartbeat notices, so the failing request and the ones after it are served
    from memory instead of returning 503.
    """

    def __init__(self, state: ConnectivityState):
        self._state = state

    def _call(self, operation: str, *args) -> Any:
        store = self._state.current()
        try:
            return getattr(store, operation)(*args)
        except UnavailableError as exc:
            if store is self._state.fallback:
                raise
            self._state.mark_offline(str(exc))
            return getattr(self._state.fallback, operation)(*args)

    def upsert_pending(self, pending):
        return self._call("upsert_pending", pending)

    def find_pending(self, email):
        return self._call("find_pending", email)

    def delete_pending(self, email):
        return self._call("delete_pending", email)

    def create_user(self, user):
        return self._call("create_user", user)

    def find_user_by_email(self, email):
        return self._call("find_user_by_email", email)

    def update_user(self, user):
        return self._call("update_user", user)

    def create_reset_token(self, token):
        return self._call("create_reset_token", token)

    def find_reset_token(self, token):
        return self._call("find_reset_token", token)

    def delete_reset_token(self, token):
        return self._call("delete_reset_token", token)


class MongoTopologyListener(monitoring.TopologyListener):
    """Feeds pymongo topology changes into a ConnectivityState.

    Online means the topology has a writable server, so a single secondary
    failing its heartbeat does not move the app to memory. Switching online
    runs index setup, which needs server selection; that cannot happen on the
    driver's own monitoring thread, so it is handed to a short-lived thread.
    """

    def __init__(self, state: Optional[ConnectivityState] = None):
        self._state = state

    def attach(self, state: ConnectivityState) -> None:
        self._state = state

    def opened(self, event) -> None:
        pass

    def closed(self, event) -> None:
        pass

    def description_changed(self, event) -> None:
        state = self._state
        if state is None:
            return
        if event.new_description.has_writable_server():
            if not state.online:
                threading.Thread(target=state.mark_online, name="mongo-connect", daemon=True).start()
        else:
            state.mark_offline("no writable MongoDB server")

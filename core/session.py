"""Session lifecycle for the store.

A session owns one ``BudgetStore`` (plus its event bus and service facade)
kept in a mutable mapping, ``st.session_state`` in the app. Nothing outlives
the session: ``close_session`` drops it all.
"""

import logging
from datetime import datetime
from typing import MutableMapping, Optional

from core import config
from core.domain import User
from core.events import EventBus, register_default_handlers
from core.services import BudgetService
from core.store import BudgetStore
from core.transforms import load_seed

logger = logging.getLogger(__name__)

STORE_KEY = "budget_store"
SERVICE_KEY = "budget_service"
USER_KEY = "user"


class SessionNotStartedError(RuntimeError):
    pass


def open_session(
    state: MutableMapping,
    user: Optional[User] = None,
    seed_path=None,
    allow_orphans: Optional[bool] = None,
) -> BudgetStore:
    """Create the session's store, or return the one already open."""
    if STORE_KEY in state:
        return state[STORE_KEY]

    budgets, expenses = ((), ())
    if seed_path:
        budgets, expenses = load_seed(seed_path)
        logger.info("Seeded session with %d budget(s) and %d expense(s)", len(budgets), len(expenses))

    bus = EventBus()
    register_default_handlers(bus)
    store = BudgetStore(
        budgets,
        expenses,
        bus=bus,
        allow_orphans=config.ALLOW_ORPHAN_EXPENSES if allow_orphans is None else allow_orphans,
    )

    state[STORE_KEY] = store
    state[SERVICE_KEY] = BudgetService(store)
    state[USER_KEY] = user or User(email=config.DEMO_USER_EMAIL, created_at=datetime.now())
    logger.info("Session opened for %s", state[USER_KEY].email)
    return store


def get_store(state: MutableMapping) -> BudgetStore:
    try:
        return state[STORE_KEY]
    except KeyError:
        raise SessionNotStartedError("open_session() has not been called") from None


def get_service(state: MutableMapping) -> BudgetService:
    get_store(state)
    return state[SERVICE_KEY]


def get_user(state: MutableMapping) -> Optional[User]:
    return state.get(USER_KEY)


def close_session(state: MutableMapping) -> None:
    for key in (STORE_KEY, SERVICE_KEY, USER_KEY):
        state.pop(key, None)
    logger.info("Session closed")

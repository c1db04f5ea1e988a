import logging
from datetime import datetime
from typing import Callable, Dict, List, NamedTuple

__all__ = [
    'Event', 'EventBus',
    'BUDGET_ADDED', 'BUDGET_UPDATED', 'BUDGET_DELETED',
    'EXPENSE_ADDED', 'EXPENSE_UPDATED', 'EXPENSE_DELETED', 'BUDGET_ALERT',
    'budget_alert_handler', 'log_event_handler', 'register_default_handlers',
]

logger = logging.getLogger(__name__)


class Event(NamedTuple):
    name: str
    ts: str
    payload: dict


class EventBus:
    def __init__(self):
        self._subscribers: Dict[str, List[Callable[[Event, dict], dict]]] = {}

    def subscribe(self, name: str, handler: Callable[[Event, dict], dict]) -> None:
        self._subscribers.setdefault(name, []).append(handler)

    def publish(self, name: str, payload: dict) -> List[dict]:
        handlers = self._subscribers.get(name)
        if not handlers:
            return []

        event = Event(name=name, ts=datetime.now().isoformat(), payload=payload)
        logger.debug("Publishing %s to %d handler(s)", name, len(handlers))

        return [handler(event, payload) for handler in list(handlers)]

    def unsubscribe(self, name: str, handler: Callable[[Event, dict], dict]) -> None:
        if handler in self._subscribers.get(name, []):
            self._subscribers[name].remove(handler)


BUDGET_ADDED = "BUDGET_ADDED"
BUDGET_UPDATED = "BUDGET_UPDATED"
BUDGET_DELETED = "BUDGET_DELETED"
EXPENSE_ADDED = "EXPENSE_ADDED"
EXPENSE_UPDATED = "EXPENSE_UPDATED"
EXPENSE_DELETED = "EXPENSE_DELETED"
BUDGET_ALERT = "BUDGET_ALERT"


def budget_alert_handler(event: Event, payload: dict) -> dict:
    """Turn an expense or limit change into an alert when its budget is running out.

    Expects ``budget_name``, ``spent``, ``limit`` and ``status`` (a status value
    string) in the payload. Returns ``{}`` while the budget is nominal.
    """
    status = payload.get("status")
    if status not in ("warning", "critical"):
        return {}

    name = payload.get("budget_name", payload.get("budget_id", ""))
    spent = payload.get("spent", 0)
    limit = payload.get("limit", 0)
    if spent > limit:
        message = f"Over budget for {name}: {spent:.2f} / {limit:.2f}"
    elif status == "critical":
        message = f"Budget {name} is almost used up: {spent:.2f} / {limit:.2f}"
    else:
        message = f"Budget {name} is running low: {spent:.2f} / {limit:.2f}"

    return {"alert": message, "budget_id": payload.get("budget_id"), "status": status}


def log_event_handler(event: Event, payload: dict) -> dict:
    logger.info("%s %s", event.name, {k: v for k, v in payload.items() if k.endswith("_id")})
    return {}


def register_default_handlers(bus: EventBus) -> None:
    for name in (BUDGET_ADDED, BUDGET_UPDATED, BUDGET_DELETED,
                 EXPENSE_ADDED, EXPENSE_UPDATED, EXPENSE_DELETED):
        bus.subscribe(name, log_event_handler)

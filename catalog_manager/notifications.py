"""In-process toast notifications.

The Toaster keeps the queue of toasts a renderer should display. A toast
may carry one action (e.g. the delete confirmation); the action runs only
when the user clicks it, and dismissing the toast drops it silently.
"""

import itertools
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

import structlog

logger = structlog.get_logger()

DEFAULT_DURATION_MS = 4000


class ToastKind(str, Enum):
    """Toast severity."""

    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class ToastAction:
    """Button embedded in a toast."""

    label: str
    on_click: Callable[[], object]


@dataclass
class Toast:
    """A single notification."""

    id: int
    kind: ToastKind
    message: str
    action: ToastAction | None = None
    duration_ms: int = DEFAULT_DURATION_MS
    dismissed: bool = field(default=False)


class Toaster:
    """Queue of toasts for the operator."""

    def __init__(self) -> None:
        self._toasts: list[Toast] = []
        self._ids = itertools.count(1)
        self._listeners: list[Callable[[list[Toast]], None]] = []

    @property
    def active(self) -> list[Toast]:
        """Toasts not yet dismissed, oldest first."""
        return [t for t in self._toasts if not t.dismissed]

    @property
    def history(self) -> list[Toast]:
        """Every toast shown so far, oldest first."""
        return list(self._toasts)

    def subscribe(self, listener: Callable[[list[Toast]], None]) -> Callable[[], None]:
        """Register a listener receiving the active toasts on every change."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def success(self, message: str, duration_ms: int = DEFAULT_DURATION_MS) -> Toast:
        """Show a success toast."""
        return self._push(ToastKind.SUCCESS, message, None, duration_ms)

    def error(
        self,
        message: str,
        action: ToastAction | None = None,
        duration_ms: int = DEFAULT_DURATION_MS,
    ) -> Toast:
        """Show an error toast, optionally with an action button."""
        return self._push(ToastKind.ERROR, message, action, duration_ms)

    def dismiss(self, toast_id: int) -> None:
        """Dismiss a toast without running its action."""
        toast = self._find(toast_id)
        if toast is None or toast.dismissed:
            return
        toast.dismissed = True
        logger.debug("Toast dismissed", toast_id=toast_id)
        self._notify()

    def click_action(self, toast_id: int) -> None:
        """Run the action of a toast once, then dismiss it.

        Raises:
            LookupError: If the toast is unknown, dismissed, or has no action.
        """
        toast = self._find(toast_id)
        if toast is None or toast.dismissed or toast.action is None:
            raise LookupError(f"Toast {toast_id} has no available action")

        toast.dismissed = True
        logger.debug("Toast action clicked", toast_id=toast_id, label=toast.action.label)
        self._notify()
        toast.action.on_click()

    def _push(
        self,
        kind: ToastKind,
        message: str,
        action: ToastAction | None,
        duration_ms: int,
    ) -> Toast:
        toast = Toast(
            id=next(self._ids),
            kind=kind,
            message=message,
            action=action,
            duration_ms=duration_ms,
        )
        self._toasts.append(toast)
        logger.info(
            "Toast shown",
            toast_id=toast.id,
            kind=kind.value,
            message=message,
            has_action=action is not None,
        )
        self._notify()
        return toast

    def _find(self, toast_id: int) -> Toast | None:
        for toast in self._toasts:
            if toast.id == toast_id:
                return toast
        return None

    def _notify(self) -> None:
        active = self.active
        for listener in list(self._listeners):
            listener(active)

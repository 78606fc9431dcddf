"""Progress notifications to an optional caller-supplied observer."""

import logging
from typing import Callable

logger = logging.getLogger(__name__)

ProgressObserver = Callable[[str, str, int | None], None]


class ProgressReporter:
    """Forwards (phase, message, percent) to the observer, if any.

    A failing observer is logged and otherwise ignored; it never aborts the
    rewrite it is watching.
    """

    def __init__(self, observer: ProgressObserver | None = None):
        self._observer = observer

    def notify(self, phase: str, message: str, percent: int | None = None) -> None:
        if self._observer is None:
            return
        try:
            self._observer(phase, message, percent)
        except Exception:
            logger.warning("Progress observer failed during %r", phase, exc_info=True)

from __future__ import annotations

import enum
import threading

__all__ = ["Status", "CancellationToken"]


class Status(enum.IntEnum):
    """Outcome of a minimization (or of a curve fit driven by one)."""

    SUCCESS = 0
    # initial params (or every attempt to find other simplex vertices) gave NaN
    INITIALIZATION_FAILURE = 1
    ABORTED = 2
    # a rebuild of the simplex gave only NaN; the result may be inaccurate
    REINITIALIZATION_FAILURE = 3
    MAX_ITERATIONS_EXCEEDED = 4
    # no two results within the error limits after all restarts
    MAX_RESTARTS_EXCEEDED = 5

    @property
    def message(self) -> str:
        return _MESSAGES[self]

    @property
    def is_terminal(self) -> bool:
        """No further restart rounds are attempted after this status."""
        return self in (Status.INITIALIZATION_FAILURE, Status.ABORTED)

    @property
    def is_reliable(self) -> bool:
        return self is Status.SUCCESS


_MESSAGES = {
    Status.SUCCESS: "Success",
    Status.INITIALIZATION_FAILURE: "Initialization failure; no result",
    Status.ABORTED: "Aborted",
    Status.REINITIALIZATION_FAILURE: "Re-initialization failure (inaccurate result?)",
    Status.MAX_ITERATIONS_EXCEEDED: "Max. no. of iterations reached (inaccurate result?)",
    Status.MAX_RESTARTS_EXCEEDED: "Max. no. of restarts reached (inaccurate result?)",
}


class CancellationToken:
    """Thread-safe abort flag shared by a minimizer and its objective.

    The objective function may poll an external signal (e.g. a UI 'escape'
    key) and call ``cancel()``; the minimizer polls ``cancelled`` in its
    run and iteration loops and unwinds with the best vertex found so far.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def reset(self) -> None:
        self._event.clear()

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self.cancelled})"

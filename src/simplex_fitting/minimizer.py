"""Nelder-Mead simplex minimizer.

Includes the 'outside contraction' described in
J.C. Lagarias, J.A. Reeds, M.H. Wright, P. Wright: Convergence properties of
the Nelder-Mead simplex algorithm in low dimensions. SIAM J. Optim. 9,
112-147 (1998), with these differences:

- If the outside contraction is rejected, an inside contraction is tried
  before shrinking the whole simplex.
- No 'ordering rules' for equal function values; the first vertex found wins.
- When checking for convergence, the centroid of the simplex is evaluated and
  may replace the best vertex.

Re-initialization: a converged simplex is rebuilt around its best vertex,
keeping the typical parameter variations, and minimized again until two
consecutive results agree. This avoids premature termination and escapes a
degenerate simplex.

Restarts: unless ``max_restarts`` is 0, two independent minimizations (with
different random seeds) run per round, one of them on a worker thread. Rounds
are repeated until two results agree within the error limits. A local minimum
is still accepted if it is found twice and nothing better turned up.

The objective should return NaN (not a large penalty) outside of its domain,
and the domain should be convex.
"""
from __future__ import annotations

import logging
import math
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, List, Optional, Sequence, Tuple

import numpy as np
from warnings import warn

from .settings import MinimizerSettings
from .status import CancellationToken, Status
from .util import as_float_array

log = logging.getLogger(__name__)

__all__ = ["Minimizer", "Objective"]

# The objective receives the whole vertex row (num_params parameters, the
# function value slot, extra scratch slots) and returns the value to minimize.
Objective = Callable[[np.ndarray], float]

C_REFLECTION = 1.0
C_CONTRACTION = 0.5
C_EXPANSION = 2.0
C_SHRINK = 0.5
# parameter variation should not be lower than typical value by more than this
WORST_RATIO = 1e-3
# seed offset for the run on the worker thread
SECOND_THREAD_SEED_OFFSET = 1000000

_CONTINUE = (Status.SUCCESS, Status.REINITIALIZATION_FAILURE)
_CONTINUE_ROUNDS = (
    Status.SUCCESS,
    Status.REINITIALIZATION_FAILURE,
    Status.MAX_ITERATIONS_EXCEEDED,
)
# when both workers of a round end differently, the more severe one is reported
_SEVERITY = {
    Status.SUCCESS: 0,
    Status.REINITIALIZATION_FAILURE: 1,
    Status.MAX_ITERATIONS_EXCEEDED: 2,
    Status.MAX_RESTARTS_EXCEEDED: 3,
    Status.INITIALIZATION_FAILURE: 4,
    Status.ABORTED: 5,
}


class _RunState:
    """Bookkeeping of one minimize() call, shared by its workers."""

    def __init__(self, token: CancellationToken, max_iter: int):
        self.token = token
        self.max_iter = max_iter
        self.lock = threading.Lock()
        self.results: List[np.ndarray] = []
        self.total_num_iter = 0
        self.num_completed = 0
        self.was_initialized = False

    def count_iteration(self) -> int:
        with self.lock:
            self.total_num_iter += 1
            return self.total_num_iter


class _Worker:
    """One minimization run: its own random generator, simplex and status."""

    def __init__(self, state: _RunState, seed: int):
        self.state = state
        self.rng = np.random.default_rng(seed)
        self._status = Status.SUCCESS

    @property
    def status(self) -> Status:
        if self.state.token.cancelled:
            return Status.ABORTED
        return self._status

    @status.setter
    def status(self, value: Status) -> None:
        self._status = value


class Minimizer:
    """Derivative-free minimizer of a scalar function of num_params variables.

    Typical use::

        m = Minimizer(max_restarts=2, random_seed=1)
        m.set_function(objective, num_params)
        status = m.minimize(initial_params, initial_param_variations)
        best = m.get_params()          # parameters, then the function value

    ``objective(vertex)`` gets an array with at least num_params+1 elements
    and must not modify them; the minimizer stores the returned value at
    index num_params. Elements beyond that (see set_extra_array_elements)
    are scratch space for the objective. The objective must be safe to call
    from two threads at once unless ``max_threads=1``.
    """

    def __init__(
        self,
        func: Optional[Objective] = None,
        num_params: int = 0,
        *,
        settings: Optional[MinimizerSettings] = None,
        cancel_token: Optional[CancellationToken] = None,
        **options: Any,
    ):
        self.settings = (settings or MinimizerSettings()).with_options(**options)
        self.cancel_token = cancel_token or CancellationToken()
        self._func: Optional[Objective] = None
        self._num_params = 0
        self._num_extra = 0
        self._result: Optional[np.ndarray] = None
        self._state: Optional[_RunState] = None
        self.status: Optional[Status] = None
        if func is not None:
            self.set_function(func, num_params)

    # ---- configuration ----
    def configure(self, **options: Any) -> "Minimizer":
        """Replace some settings (see MinimizerSettings); returns self."""
        self.settings = self.settings.with_options(**options)
        return self

    def set_function(self, func: Objective, num_params: int) -> None:
        """Set the function to minimize and its number of parameters."""
        if not callable(func):
            raise TypeError("func must be callable.")
        if int(num_params) < 1:
            raise ValueError("num_params must be >= 1.")
        self._func = func
        self._num_params = int(num_params)
        self._result = None

    def set_extra_array_elements(self, num_extra: int) -> None:
        """Reserve trailing array elements for private use by the objective."""
        if int(num_extra) < 0:
            raise ValueError("num_extra must be >= 0.")
        self._num_extra = int(num_extra)
        self._result = None

    def set_max_iterations(self, max_iterations: int) -> None:
        self.configure(max_iterations=max_iterations)

    def set_max_restarts(self, max_restarts: int) -> None:
        self.configure(max_restarts=max_restarts)

    def set_random_seed(self, seed: int) -> None:
        self.configure(random_seed=seed)

    def set_max_error(self, max_rel_error: float, max_abs_error: Optional[float] = None) -> None:
        if max_abs_error is None:
            self.configure(max_rel_error=max_rel_error)
        else:
            self.configure(max_rel_error=max_rel_error, max_abs_error=max_abs_error)

    def set_param_resolutions(self, resolutions: Optional[Sequence[float]]) -> None:
        self.configure(
            param_resolutions=None if resolutions is None else tuple(float(r) for r in resolutions)
        )

    def set_maximum_threads(self, num_threads: int) -> None:
        self.configure(max_threads=num_threads)

    def abort(self) -> None:
        """Abort minimization; get_params() returns the best vertex found so far.

        May be called from within the objective function.
        """
        self.cancel_token.cancel()

    # ---- results ----
    @property
    def num_params(self) -> int:
        return self._num_params

    def get_params(self) -> np.ndarray:
        """Best vertex found: parameters, function value, extra elements.

        All NaN before minimization, after an INITIALIZATION_FAILURE or an
        abort at the very beginning.
        """
        if self._result is None:
            return np.full(self._num_params + 1 + self._num_extra, np.nan)
        return self._result.copy()

    def get_function_value(self) -> float:
        if self._result is None:
            return math.nan
        return float(self._result[self._num_params])

    def get_iterations(self) -> int:
        """Iterations of all runs and threads of the last minimize call."""
        return 0 if self._state is None else self._state.total_num_iter

    def get_max_iterations(self) -> int:
        return self.settings.resolved_max_iterations(self._num_params)

    def get_max_restarts(self) -> int:
        return self.settings.max_restarts

    def get_completed_minimizations(self) -> int:
        """Runs not aborted or stopped by the iteration limit (typically 2)."""
        return 0 if self._state is None else self._state.num_completed

    # ---- minimization ----
    def minimize(
        self,
        initial_params: Optional[Sequence[float]] = None,
        initial_param_variations: Optional[Sequence[float]] = None,
    ) -> Status:
        """Minimize with restarts until two runs agree within the error limits.

        Parameters
        ----------
        initial_params:
            Starting values; zeros if None. The objective should not be NaN
            there (otherwise nearby valid values are searched).
        initial_param_variations:
            Parameters are initially varied by up to +/- these values.
            Default: 10% of the initial value, 0.01 for zero. For several
            minima, use values well below the distance to the nearest local
            minimum.

        Returns
        -------
        Status
            SUCCESS if two runs have found minima with the same value.
        """
        initial, variations = self._prepare(initial_params, initial_param_variations)
        state = self._begin()
        s = self.settings
        single = s.use_single_thread()
        max_loop = s.max_restarts + 1
        if single and s.max_restarts > 0:
            max_loop *= 2
        pool = None
        if s.max_restarts > 0 and not single:
            pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="Minimizer")
        try:
            status = self._run_rounds(state, pool, max_loop, initial, variations)
        finally:
            if pool is not None:
                pool.shutdown(wait=True)
        log.debug(
            "minimize: %s after %d iterations, %d completed minimizations",
            status.name,
            state.total_num_iter,
            state.num_completed,
        )
        self.status = status
        return status

    def minimize_once(
        self,
        initial_params: Optional[Sequence[float]] = None,
        initial_param_variations: Optional[Sequence[float]] = None,
    ) -> Status:
        """One run including re-initializations, no restarts, no threads."""
        initial, variations = self._prepare(initial_params, initial_param_variations)
        state = self._begin()
        status, vertex = self._minimize_once(state, initial, variations, self.settings.random_seed)
        if vertex is not None:
            self._result = vertex
        self.status = status
        return status

    def _prepare(
        self,
        initial_params: Optional[Sequence[float]],
        initial_param_variations: Optional[Sequence[float]],
    ) -> Tuple[np.ndarray, Optional[np.ndarray]]:
        if self._func is None:
            raise ValueError("No function to minimize; call set_function first.")
        n = self._num_params
        initial = np.zeros(n)
        given = as_float_array(initial_params)
        if given is not None:
            k = min(given.shape[0], n)
            initial[:k] = given[:k]
            if np.any(np.isnan(initial)):
                warn("Initial parameters contain NaN.", UserWarning, stacklevel=3)
        variations = as_float_array(initial_param_variations)
        return initial, variations

    def _begin(self) -> _RunState:
        self.cancel_token.reset()
        self._result = None
        state = _RunState(
            self.cancel_token, self.settings.resolved_max_iterations(self._num_params)
        )
        self._state = state
        return state

    def _run_rounds(
        self,
        state: _RunState,
        pool: Optional[ThreadPoolExecutor],
        max_loop: int,
        initial: np.ndarray,
        variations: Optional[np.ndarray],
    ) -> Status:
        seed = self.settings.random_seed
        status = Status.SUCCESS
        for i in range(max_loop):
            future = None
            if pool is not None:
                future = pool.submit(
                    self._minimize_once,
                    state,
                    initial,
                    variations,
                    seed + SECOND_THREAD_SEED_OFFSET + i,
                )
            outcomes = [self._minimize_once(state, initial, variations, seed + i)]
            if future is not None:
                outcomes.append(future.result())
            if any(v is not None for _, v in outcomes):
                # a simplex was made in this round; a failing partner is not an
                # initialization failure
                outcomes = [
                    (Status.REINITIALIZATION_FAILURE if s is Status.INITIALIZATION_FAILURE else s, v)
                    for s, v in outcomes
                ]
            status = max((s for s, _ in outcomes), key=_SEVERITY.__getitem__)
            if state.token.cancelled:
                status = Status.ABORTED

            with state.lock:
                # fixed order (calling thread first) keeps results reproducible
                state.results.extend(v for _, v in outcomes if v is not None)
                if state.results:
                    state.was_initialized = True
                results = list(state.results)
            if not results and self._result is None:
                return status
            if self._result is None:
                self._result = results[0]
            for r in results:  # best result so far
                if self._value(r) < self._value(self._result):
                    self._result = r

            if status not in _CONTINUE_ROUNDS:
                return status  # permanent error or aborted
            if state.total_num_iter >= state.max_iter:
                return Status.MAX_ITERATIONS_EXCEEDED
            with state.lock:
                # discard results that are significantly worse
                state.results = [
                    r for r in state.results if self._results_agree(r, self._result, 1.0)
                ]
                if len(state.results) >= 2:
                    return Status.SUCCESS
        if self.settings.max_restarts > 0:
            return Status.MAX_RESTARTS_EXCEEDED
        return status

    def _minimize_once(
        self,
        state: _RunState,
        initial: np.ndarray,
        variations: Optional[np.ndarray],
        seed: int,
    ) -> Tuple[Status, Optional[np.ndarray]]:
        """One run, re-initializing the simplex until the result is stable.

        Returns the status and the best vertex (None if there is none).
        state.was_initialized only changes between rounds, so both workers of
        a round see the same value.
        """
        worker = _Worker(state, seed)
        simp = self._make_simplex(worker, initial, variations)
        if simp is None:
            worker.status = (
                Status.REINITIALIZATION_FAILURE
                if state.was_initialized
                else Status.INITIALIZATION_FAILURE
            )
            return worker.status, None
        best = self._minimize_simplex(worker, simp)
        best_so_far = simp[best].copy()
        reinit_failure = False
        while worker.status in _CONTINUE:
            new_variations = self._make_new_param_variations(simp, best, initial, variations)
            if not self._reinitialize_simplex(worker, simp, best, new_variations):
                best = 0  # moved there by _reinitialize_simplex
                reinit_failure = True
                break
            best = self._minimize_simplex(worker, simp)
            if self._results_agree(simp[best], best_so_far, 2.0):
                break
            best_so_far = simp[best].copy()
        if reinit_failure:
            log.debug("Simplex re-initialization failed (seed %d)", seed)
            worker.status = Status.REINITIALIZATION_FAILURE
        elif worker.status in _CONTINUE:
            with state.lock:
                state.num_completed += 1
        return worker.status, simp[best].copy()

    def _minimize_simplex(self, worker: _Worker, simp: np.ndarray) -> int:
        """Nelder-Mead iterations on simp; returns the index of the best vertex.

        One call never does more than 0.4*max_iter iterations.
        """
        state = worker.state
        n = self._num_params
        width = simp.shape[1]
        center = np.zeros(width)
        reflected = np.zeros(width)
        second_try = np.zeros(width)
        resolutions = self.settings.resolutions_array(n)
        max_iter = state.max_iter

        worst, next_worst, best = self._order(simp)
        this_num_iter = 0
        while True:
            state.count_iteration()
            this_num_iter += 1
            self._get_center(simp, worst, center)
            # reflect worst vertex through centroid of not-worst
            self._get_vertex_and_evaluate(center, simp[worst], -C_REFLECTION, reflected)
            r_value = reflected[n]
            accepted = False
            if r_value <= simp[best, n]:
                self._get_vertex_and_evaluate(center, simp[worst], -C_EXPANSION, second_try)
                if second_try[n] <= r_value:
                    simp[worst] = second_try
                    accepted = True
            if not accepted:
                if r_value < simp[next_worst, n]:
                    simp[worst] = reflected
                    accepted = True
                elif r_value < simp[worst, n]:
                    # outer contraction
                    self._get_vertex_and_evaluate(center, simp[worst], -C_CONTRACTION, second_try)
                    if second_try[n] <= r_value:
                        simp[worst] = second_try
                        accepted = True
                elif r_value > simp[worst, n] or math.isnan(r_value):
                    # inner contraction
                    self._get_vertex_and_evaluate(center, simp[worst], C_CONTRACTION, second_try)
                    if second_try[n] < simp[worst, n]:
                        simp[worst] = second_try
                        accepted = True
            if not accepted:
                self._shrink_simplex_and_evaluate(simp, best)

            # if the new 'worst' is not close to 'best', don't check any further
            check_resolution = resolutions is not None and self._below_resolution_limit(
                simp[worst], simp[best], resolutions
            )
            worst, next_worst, best = self._order(simp)
            if check_resolution and all(
                self._below_resolution_limit(simp[v], simp[best], resolutions)
                for v in range(simp.shape[0])
                if v != best
            ):
                break
            if self._below_error_limit(simp[best, n], simp[worst, n], 4.0):
                # make sure we are at the minimum: try the center of the simplex
                self._get_center(simp, -1, second_try)
                self._evaluate(second_try)
                if second_try[n] < simp[best, n]:
                    simp[best] = second_try
            if self._below_error_limit(simp[best, n], simp[worst, n], 4.0):
                break
            if state.total_num_iter > max_iter or this_num_iter > 4 * (max_iter // 10):
                worker.status = Status.MAX_ITERATIONS_EXCEEDED
            if worker.status is not Status.SUCCESS:
                break
        return best

    # ---- simplex construction ----
    def _make_simplex(
        self, worker: _Worker, initial: np.ndarray, variations: Optional[np.ndarray]
    ) -> Optional[np.ndarray]:
        """Initialize and evaluate a simplex; None on failure."""
        n = self._num_params
        simp = np.zeros((n + 1, n + 1 + self._num_extra))
        simp[0, :n] = initial
        self._evaluate(simp[0])
        if math.isnan(simp[0, n]):
            log.debug("Initial parameters yield NaN: %s", simp[0, :n])
            self._find_valid_initial_params(worker, simp[0], variations)
        if math.isnan(simp[0, n]):
            log.debug("Could not find initial parameters not yielding NaN")
            return None
        if self._initialize_simplex(worker, simp, variations):
            return simp
        log.debug("Could not make simplex vertices not yielding NaN")
        return None

    def _find_valid_initial_params(
        self, worker: _Worker, params: np.ndarray, variations: Optional[np.ndarray]
    ) -> None:
        """Random search for parameters with a non-NaN value, in place."""
        n = self._num_params
        rng = worker.rng
        max_attempts = 50 * n * n
        # will try up to 1e-20 to 1e20 times the variations
        range_multiply_log = math.log(1e20) / max(max_attempts - 1, 1)
        first = np.where(np.isnan(params[:n]), 0.0, params[:n])
        if variations is not None and variations.shape[0] >= n:
            var = variations[:n].copy()
        else:
            var = 0.1 * first
        bad = np.isnan(var) | (np.abs(var) < 1e-10) | (np.abs(var) > 1e10)
        var[bad] = 0.1
        for attempt in range(max_attempts):
            if attempt < max_attempts // 10:
                multiplier = np.ones(n)
            else:  # after a while, try different orders of magnitude
                multiplier = np.exp(range_multiply_log * attempt * 2 * (rng.random(n) - 0.5))
            params[:n] = multiplier * (first + 2 * (rng.random(n) - 0.5) * var)
            self._evaluate(params)
            if not math.isnan(params[n]):
                return

    def _reinitialize_simplex(
        self, worker: _Worker, simp: np.ndarray, best: int, variations: np.ndarray
    ) -> bool:
        """New vertices around the best one, keeping the rough size of the simplex."""
        if best != 0:
            simp[[0, best]] = simp[[best, 0]]
        return self._initialize_simplex(worker, simp, variations)

    def _initialize_simplex(
        self, worker: _Worker, simp: np.ndarray, param_variations: Optional[np.ndarray]
    ) -> bool:
        """Create and evaluate all vertices except vertex 0; False on failure."""
        n = self._num_params
        rng = worker.rng
        origin = simp[0, :n]
        variations = np.empty(n)
        for i in range(n):
            if param_variations is not None and i < param_variations.shape[0]:
                r = float(param_variations[i])
            else:
                r = 0.1 * abs(float(origin[i]))
            if math.isnan(r) or r < 1e-100:
                r = 0.01  # must be nonzero
            if origin[i] != 0 and abs(r / origin[i]) < 1e-10:
                r = abs(origin[i] * 1e-10)  # more than the very last digits
            variations[i] = r
        # orthogonalization does not work with extremely different ranges
        orthogonalize = variations.max() < variations.min() * 1e16
        max_attempts = 100 * n
        for v in range(1, n + 1):
            num_tries = 0
            while True:
                if num_tries > max_attempts:
                    return False
                num_tries += 1
                # random vector, normalized to the variations
                trial = rng.random(n) - 0.5
                # after many NaN values, finding valid params may be easier without
                if orthogonalize and num_tries < max_attempts / 2:
                    for v1 in range(1, v):
                        d = (simp[v1, :n] - origin) / variations
                        length_sqr = float(d @ d)
                        if length_sqr > 0:
                            trial -= d * (float(d @ trial) / length_sqr)
                sum_sqr = float(trial @ trial)
                if not sum_sqr > 0:
                    continue
                non_zero_random = -1 + 1.8 * rng.random()
                if non_zero_random > -0.1:
                    non_zero_random += 0.2  # -1..-0.1 or +0.1..1
                simp[v, :n] = origin + variations * trial * (non_zero_random / math.sqrt(sum_sqr))
                self._evaluate(simp[v])
                if not math.isnan(simp[v, n]) or worker.status not in _CONTINUE:
                    break
        return True

    def _make_new_param_variations(
        self,
        simp: np.ndarray,
        best: int,
        initial: np.ndarray,
        initial_variations: Optional[np.ndarray],
    ) -> np.ndarray:
        """Variations for re-initializing, from the spread of the old simplex.

        The simplex may have become degenerate (one parameter equal for all
        vertices); a variation much smaller than typical relative to its
        reference size is raised to WORST_RATIO times the typical value.
        """
        n = self._num_params
        best_params = simp[best, :n]
        others = np.delete(simp[:, :n], best, axis=0)
        # larger than the old simplex
        variations = 10 * np.sqrt(np.sum((others - best_params) ** 2, axis=0))
        if initial_variations is not None and initial_variations.shape[0] >= n:
            related_to = initial_variations[:n].astype(float)
        else:
            related_to = np.maximum(np.abs(initial), np.abs(best_params))
        with np.errstate(divide="ignore", invalid="ignore"):
            ratio = variations / related_to
            log_relative = np.where(variations > related_to, 0.0, np.log(ratio))
            # a fully collapsed parameter (log 0) does not count for the typical value
            finite = np.isfinite(log_relative)
            typical = math.exp(float(np.mean(log_relative[finite]))) if finite.any() else 1.0
            too_small = (variations < related_to) & (ratio < typical * WORST_RATIO)
        variations[too_small] = related_to[too_small] * typical * WORST_RATIO
        return variations

    # ---- primitives ----
    def _evaluate(self, vertex: np.ndarray) -> None:
        vertex[self._num_params] = float(self._func(vertex))  # type: ignore[misc]

    def _value(self, vertex: np.ndarray) -> float:
        return float(vertex[self._num_params])

    def _get_vertex_and_evaluate(
        self, center: np.ndarray, worst: np.ndarray, how_far: float, new_vertex: np.ndarray
    ) -> None:
        """Point on the line center-worst (+1 is worst), evaluated."""
        n = self._num_params
        new_vertex[:n] = (1.0 - how_far) * center[:n] + how_far * worst[:n]
        self._evaluate(new_vertex)

    def _get_center(self, simp: np.ndarray, exclude: int, center: np.ndarray) -> None:
        """Centroid of all vertices except 'exclude' (-1: none)."""
        n = self._num_params
        center[:] = 0.0
        if exclude < 0:
            center[:n] = simp[:, :n].mean(axis=0)
        else:
            center[:n] = (simp[:, :n].sum(axis=0) - simp[exclude, :n]) / (simp.shape[0] - 1)

    def _shrink_simplex_and_evaluate(self, simp: np.ndarray, best: int) -> None:
        n = self._num_params
        for v in range(simp.shape[0]):
            if v != best:
                simp[v, :n] = C_SHRINK * simp[v, :n] + (1 - C_SHRINK) * simp[best, :n]
                self._evaluate(simp[v])

    def _order(self, simp: np.ndarray) -> Tuple[int, int, int]:
        """Indices of the worst, next-worst and best vertices."""
        values = simp[:, self._num_params].tolist()
        worst = best = 0
        for i, value in enumerate(values):
            if value < values[best]:
                best = i
            if value > values[worst]:
                worst = i
        next_worst = best
        for i, value in enumerate(values):
            if i != worst and value > values[next_worst]:
                next_worst = i
        return worst, next_worst, best

    def _below_error_limit(self, highest: float, lowest: float, sensitivity: float) -> bool:
        """Whether two values agree; limits are tightened by 'sensitivity'."""
        abs_error = sensitivity * abs(highest - lowest)
        rel_error = abs_error / (max(abs(highest), abs(lowest)) + 1e-100)
        return rel_error < self.settings.max_rel_error or abs_error < self.settings.max_abs_error

    def _results_agree(self, vertex1: np.ndarray, vertex2: np.ndarray, sensitivity: float) -> bool:
        """Same value within the error limits, or same point within the resolutions."""
        if self._below_error_limit(self._value(vertex1), self._value(vertex2), sensitivity):
            return True
        resolutions = self.settings.resolutions_array(self._num_params)
        return resolutions is not None and self._below_resolution_limit(
            vertex1, vertex2, resolutions
        )

    def _below_resolution_limit(
        self, vertex1: np.ndarray, vertex2: np.ndarray, resolutions: np.ndarray
    ) -> bool:
        n = self._num_params
        return bool(np.all(np.abs(vertex1[:n] - vertex2[:n]) < resolutions))

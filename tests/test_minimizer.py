import math
import threading

import numpy as np
import pytest

from simplex_fitting import CancellationToken, Minimizer, Status
from simplex_fitting.minimizer import WORST_RATIO, _RunState, _Worker


def _quadratic(center, weights):
    """1 + sum(w*(v-center)^2); minimum value 1 so that relative errors apply."""
    center = np.asarray(center, dtype=float)
    weights = np.asarray(weights, dtype=float)
    n = center.size

    def f(v):
        d = v[:n] - center
        return 1.0 + float(np.dot(weights * d, d))

    return f


def _rosenbrock_plus_one(v):
    return 1.0 + (1 - v[0]) ** 2 + 100 * (v[1] - v[0] ** 2) ** 2


@pytest.mark.parametrize("n", range(1, 9))
def test_convex_quadratics_converge(n):
    center = 0.5 * np.arange(1, n + 1)
    f = _quadratic(center, np.arange(1, n + 1))
    m = Minimizer(f, n, random_seed=n)

    status = m.minimize(center + 0.7, np.ones(n))

    assert status is Status.SUCCESS
    params = m.get_params()
    assert params.shape == (n + 1,)
    np.testing.assert_allclose(params[:n], center, atol=1e-4)
    assert params[n] == pytest.approx(1.0, rel=1e-9)
    assert m.get_function_value() == params[n]


def test_get_params_before_minimize_is_nan():
    m = Minimizer()
    m.set_function(_quadratic([1.0, 2.0, 3.0], [1, 1, 1]), 3)
    params = m.get_params()
    assert params.shape == (4,)
    assert np.all(np.isnan(params))
    assert math.isnan(m.get_function_value())
    assert m.get_iterations() == 0


def test_extra_array_elements_are_passed_to_objective():
    seen = []

    def f(v):
        seen.append(v.shape[0])
        v[3] = 42.0  # scratch slot for the objective
        return 1.0 + (v[0] - 1) ** 2 + (v[1] + 2) ** 2

    m = Minimizer(f, 2, max_threads=1)
    m.set_extra_array_elements(2)
    assert m.get_params().shape == (5,)
    m.minimize([0.0, 0.0])
    assert set(seen) == {5}
    assert m.get_params()[3] == 42.0


@pytest.mark.parametrize("threads", [1, 2])
def test_same_seed_gives_identical_results(threads):
    results = []
    for _ in range(2):
        m = Minimizer(_rosenbrock_plus_one, 2, random_seed=123, max_threads=threads)
        status = m.minimize([-1.2, 1.0], [0.5, 0.5])
        results.append((status, m.get_params()))
    (s1, p1), (s2, p2) = results
    assert s1 == s2
    assert np.array_equal(p1, p2)


def test_different_seeds_find_the_same_minimum():
    found = []
    for seed in (1, 2, 3):
        m = Minimizer(_rosenbrock_plus_one, 2, random_seed=seed)
        assert m.minimize([-1.2, 1.0], [0.5, 0.5]) is Status.SUCCESS
        found.append(m.get_params()[:2])
    for p in found:
        np.testing.assert_allclose(p, [1.0, 1.0], atol=1e-3)


def test_nan_region_is_avoided():
    def f(v):
        if v[0] < 1.0:
            return math.nan
        return 1.0 + v[0] ** 2 + v[1] ** 2

    m = Minimizer(f, 2, random_seed=5)
    status = m.minimize([3.0, 1.0], [0.5, 0.5])
    assert status is not Status.INITIALIZATION_FAILURE
    params = m.get_params()
    assert params[0] >= 1.0
    assert params[0] == pytest.approx(1.0, abs=1e-3)
    assert params[1] == pytest.approx(0.0, abs=1e-3)


def test_nan_initial_value_searches_valid_start():
    def f(v):
        if v[0] > 2.0:
            return math.nan
        return 1.0 + (v[0] - 1.0) ** 2

    m = Minimizer(f, 1, random_seed=0)
    assert m.minimize([2.2]) is Status.SUCCESS
    assert m.get_params()[0] == pytest.approx(1.0, abs=1e-4)


def test_initialization_failure_when_everything_is_nan():
    m = Minimizer(lambda v: math.nan, 2, random_seed=0)
    status = m.minimize([1.0, 1.0])
    assert status is Status.INITIALIZATION_FAILURE
    assert status.is_terminal
    assert np.all(np.isnan(m.get_params()))
    assert m.get_completed_minimizations() == 0


def test_abort_from_objective_keeps_best_so_far():
    calls = {"n": 0}

    def f(v):
        calls["n"] += 1
        if calls["n"] == 50:
            m.abort()
        return 1.0 + (v[0] - 3.0) ** 2 + (v[1] + 1.0) ** 2

    m = Minimizer(f, 2, max_threads=1)
    status = m.minimize([0.0, 0.0], [1.0, 1.0])
    assert status is Status.ABORTED
    params = m.get_params()
    assert np.all(np.isfinite(params))
    assert params[2] <= f(np.array([0.0, 0.0, 0.0]))

    # the next call starts afresh
    calls["n"] = 100
    assert m.minimize([0.0, 0.0], [1.0, 1.0]) is Status.SUCCESS


def test_shared_cancellation_token():
    token = CancellationToken()

    def f(v):
        token.cancel()
        return 1.0 + v[0] ** 2

    m = Minimizer(f, 1, cancel_token=token, max_threads=1)
    assert m.minimize([1.0]) is Status.ABORTED
    assert token.cancelled


def test_max_iterations_exceeded():
    f = _quadratic([0.0, 0.0, 0.0], [1, 10, 100])
    m = Minimizer(f, 3, max_iterations=10, max_threads=1)
    assert m.get_max_iterations() == 10
    status = m.minimize([10.0, 10.0, 10.0], [1.0, 1.0, 1.0])
    assert status is Status.MAX_ITERATIONS_EXCEEDED
    assert not status.is_reliable
    assert np.all(np.isfinite(m.get_params()))


def test_default_max_iterations():
    m = Minimizer(_quadratic([0.0, 0.0, 0.0], [1, 1, 1]), 3)
    assert m.get_max_iterations() == 750 * 9 * 2
    m.set_max_restarts(0)
    assert m.get_max_iterations() == 750 * 9


def test_no_restarts_runs_once():
    m = Minimizer(_quadratic([2.0, -1.0], [1, 1]), 2, max_restarts=0)
    assert m.minimize([0.0, 0.0]) is Status.SUCCESS
    assert m.get_completed_minimizations() == 1


def test_restarts_need_two_agreeing_results():
    m = Minimizer(_quadratic([2.0, -1.0], [1, 1]), 2, random_seed=9)
    assert m.minimize([0.0, 0.0]) is Status.SUCCESS
    assert m.get_completed_minimizations() == 2


def test_minimize_once():
    m = Minimizer(_quadratic([2.0, -1.0], [1, 3]), 2)
    assert m.minimize_once([0.0, 0.0]) is Status.SUCCESS
    np.testing.assert_allclose(m.get_params()[:2], [2.0, -1.0], atol=1e-4)
    assert m.get_completed_minimizations() == 1


def test_param_resolutions_stop_early():
    f = _quadratic([3.0, -1.0], [1, 1])
    m = Minimizer(f, 2, random_seed=4, param_resolutions=(1e-3, 1e-3))
    status = m.minimize([0.0, 0.0], [1.0, 1.0])
    assert status in (Status.SUCCESS, Status.MAX_RESTARTS_EXCEEDED)
    np.testing.assert_allclose(m.get_params()[:2], [3.0, -1.0], atol=1e-2)


def test_restarts_exceeded_without_agreeing_results():
    calls = []

    def disagreeing_run(state, initial, variations, seed):
        calls.append(seed)
        value = 5.0 - len(calls)
        return Status.SUCCESS, np.array([value, value])

    m = Minimizer(_quadratic([0.0], [1]), 1, max_restarts=1, max_threads=1, random_seed=7)
    m._minimize_once = disagreeing_run
    assert m.minimize([0.0]) is Status.MAX_RESTARTS_EXCEEDED
    # single thread: twice the rounds
    assert calls == [7, 8, 9, 10]
    np.testing.assert_array_equal(m.get_params(), [1.0, 1.0])


def test_reinitialization_failure_keeps_best_vertex():
    broken = []

    def f(v):
        if broken:
            return math.nan
        return 1.0 + (v[0] - 1.0) ** 2 + (v[1] + 2.0) ** 2

    m = Minimizer(f, 2, max_restarts=0, random_seed=2)
    minimize_simplex = m._minimize_simplex

    def minimize_then_break(worker, simp):
        best = minimize_simplex(worker, simp)
        broken.append(True)
        return best

    m._minimize_simplex = minimize_then_break
    assert m.minimize_once([0.0, 0.0], [0.5, 0.5]) is Status.REINITIALIZATION_FAILURE
    assert len(broken) == 1
    params = m.get_params()
    np.testing.assert_allclose(params[:2], [1.0, -2.0], atol=1e-4)
    assert params[2] == pytest.approx(1.0 + (params[0] - 1.0) ** 2 + (params[1] + 2.0) ** 2)
    assert m.get_completed_minimizations() == 0


def test_collapsed_parameter_variation_is_raised():
    m = Minimizer(lambda v: 1.0, 2)
    initial = np.array([1.0, 1.0])
    simp = np.array([[1.0, 0.0, 1.0], [1.1, 1e-9, 1.0], [0.9, -1e-9, 1.0]])
    variations = m._make_new_param_variations(simp, 0, initial, None)
    spread = 10 * math.sqrt(2) * 1e-9
    assert variations[0] == pytest.approx(10 * math.sqrt(0.02))
    # typical relative variation is the geometric mean of 1 (capped) and spread
    assert variations[1] == pytest.approx(math.sqrt(spread) * WORST_RATIO)

    simp[1:, 1] = 0.0
    variations = m._make_new_param_variations(simp, 0, initial, None)
    assert variations[1] == pytest.approx(WORST_RATIO)

    # relative to the user's variations if given
    variations = m._make_new_param_variations(simp, 0, initial, np.array([2.0, 4.0]))
    assert variations[0] == pytest.approx(10 * math.sqrt(0.02))
    assert variations[1] == pytest.approx(4.0 * (10 * math.sqrt(0.02) / 2.0) * WORST_RATIO)


def _initial_directions(variations, seed=3):
    """Normalized directions from vertex 0 to the other vertices."""
    variations = np.asarray(variations, dtype=float)
    n = variations.size
    m = Minimizer(lambda v: 1.0, n)
    worker = _Worker(_RunState(CancellationToken(), 1000), seed)
    simp = m._make_simplex(worker, np.zeros(n), variations)
    d = simp[1:, :n] / variations
    return d / np.linalg.norm(d, axis=1)[:, None]


def test_initial_simplex_is_orthogonal():
    d = _initial_directions([1.0, 2.0, 3.0])
    np.testing.assert_allclose(d @ d.T, np.eye(3), atol=1e-9)


def test_no_orthogonalization_for_extreme_variation_ranges():
    d = _initial_directions([1e-10, 1.0, 1e10])
    off_diagonal = d @ d.T - np.eye(3)
    assert np.abs(off_diagonal).max() > 1e-6


def test_extreme_variation_ranges_converge():
    f = _quadratic([2e-10, 3e10], [1e20, 1e-20])
    m = Minimizer(f, 2, random_seed=6)
    assert m.minimize([0.0, 0.0], [1e-10, 1e10]) is Status.SUCCESS
    params = m.get_params()
    assert params[0] == pytest.approx(2e-10, rel=1e-3)
    assert params[1] == pytest.approx(3e10, rel=1e-3)


@pytest.mark.parametrize("seed", range(4))
def test_initialization_failure_with_two_threads(seed):
    m = Minimizer(lambda v: math.nan, 2, random_seed=seed, max_threads=2)
    assert m.minimize([1.0, 1.0]) is Status.INITIALIZATION_FAILURE


def test_failing_worker_thread_does_not_end_the_search():
    def f(v):
        if threading.current_thread() is not threading.main_thread():
            return math.nan
        return 1.0 + (v[0] - 2.0) ** 2 + (v[1] + 1.0) ** 2

    for seed in range(3):
        m = Minimizer(f, 2, random_seed=seed, max_threads=2)
        assert m.minimize([0.0, 0.0]) is Status.SUCCESS
        np.testing.assert_allclose(m.get_params()[:2], [2.0, -1.0], atol=1e-4)
        assert m.get_completed_minimizations() >= 2



def test_zero_initial_params_by_default():
    seen = []

    def f(v):
        if not seen:
            seen.append(v[:2].copy())
        return 1.0 + (v[0] - 1) ** 2 + (v[1] - 1) ** 2

    m = Minimizer(f, 2, max_threads=1)
    m.minimize()
    np.testing.assert_array_equal(seen[0], [0.0, 0.0])


def test_nan_initial_params_warn():
    m = Minimizer(_quadratic([0.0], [1]), 1, max_threads=1)
    with pytest.warns(UserWarning):
        m.minimize([math.nan])


def test_objective_exceptions_propagate():
    def f(v):
        raise RuntimeError("boom")

    m = Minimizer(f, 2)
    with pytest.raises(RuntimeError, match="boom"):
        m.minimize([0.0, 0.0])


def test_preconditions():
    m = Minimizer()
    with pytest.raises(ValueError):
        m.minimize([0.0])
    with pytest.raises(ValueError):
        m.set_function(lambda v: 0.0, 0)
    with pytest.raises(TypeError):
        m.set_function(42, 1)
    with pytest.raises(ValueError):
        m.set_extra_array_elements(-1)
    with pytest.raises(TypeError):
        m.configure(max_restart=3)


def test_status_messages():
    assert Status.SUCCESS.message == "Success"
    assert Status.INITIALIZATION_FAILURE.message == "Initialization failure; no result"
    assert Status.MAX_RESTARTS_EXCEEDED.message == "Max. no. of restarts reached (inaccurate result?)"
    assert [int(s) for s in Status] == [0, 1, 2, 3, 4, 5]
    assert Status.ABORTED.is_terminal
    assert not Status.REINITIALIZATION_FAILURE.is_terminal

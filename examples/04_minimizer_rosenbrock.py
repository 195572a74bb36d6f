import numpy as np
from simplex_fitting import Minimizer


def rosenbrock(v):
    x, y = v[0], v[1]
    return (1 - x) ** 2 + 100 * (y - x * x) ** 2


# the minimum value is 0, where a relative error limit alone is never reached
m = Minimizer(rosenbrock, 2, random_seed=42, max_abs_error=1e-14)
status = m.minimize([-1.2, 1.0], [0.5, 0.5])

print("status:", status.name, "-", status.message)
print("minimum at", m.get_params()[:2], "value", m.get_function_value())
print("iterations:", m.get_iterations(), "of max.", m.get_max_iterations())
print("completed minimizations:", m.get_completed_minimizations())

# NaN marks the region where the function is undefined; the simplex stays out
def constrained(v):
    if v[0] < 0.5:
        return np.nan
    return (v[0] - 0.2) ** 2 + v[1] ** 2


m.set_function(constrained, 2)
m.minimize([2.0, 1.0])
print("constrained minimum:", m.get_params()[:2])

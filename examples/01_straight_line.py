import numpy as np
from simplex_fitting import CurveFitter, FitType

rng = np.random.default_rng(0)
x = np.linspace(0, 10, 30)
y = 2.0 * x - 1.0 + rng.normal(0, 0.5, size=x.size)

cf = CurveFitter(x, y)
cf.do_fit(FitType.STRAIGHT_LINE)

# a and b follow from linear regression alone: no simplex iterations needed
print(cf.get_result_string())
print("iterations:", cf.get_iterations())

import numpy as np
from simplex_fitting import CurveFitter

x = np.linspace(0, 4, 40)
y = 1.5 + 4.0 * np.exp(-0.8 * x)

cf = CurveFitter(x, y)
n = cf.do_custom_fit("y = a + b*exp(-c*x)", initial_params=[1.0, 1.0, 1.0])
print("parameters in formula:", n)
print(cf.get_result_string())

# the same model as a Python callable; a is an offset and b a factor,
# so only c needs the simplex
cf.set_offset_multiply_slope_params(0, 1, -1)
cf.do_custom_fit(lambda p, x: p[0] + p[1] * np.exp(-p[2] * x), num_params=3)
print(cf.get_params())
print("simplex dimensions:", cf.get_num_free_params())

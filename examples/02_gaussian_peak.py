import numpy as np
from simplex_fitting import CurveFitter, FitType

rng = np.random.default_rng(1)
x = np.linspace(-5, 5, 81)
y = 0.5 + (3.0 - 0.5) * np.exp(-((x - 0.7) ** 2) / (2 * 1.2**2))
y = y + rng.normal(0, 0.05, size=x.size)

cf = CurveFitter(x, y, random_seed=1)
cf.do_fit(FitType.GAUSSIAN)

a, b, c, d, sse = cf.get_params()
print(cf.get_result_string())
print(f"baseline={a:.3f} peak={b:.3f} center={c:.3f} width={d:.3f}")
# offset and height come from regression; the simplex only searches c and d
print("simplex dimensions:", cf.get_num_free_params())

import numpy as np
from simplex_fitting import CurveFitter, FitType, evaluate

# standard curve of a dose-response assay
conc = np.array([0.5, 1, 2, 4, 8, 16, 32, 64], dtype=float)
signal = evaluate(FitType.RODBARD, [0.05, 1.3, 6.0, 2.1], conc)

cf = CurveFitter(conc, signal, random_seed=7)
cf.do_fit(FitType.RODBARD)
print(cf.get_result_string())

# the NIH Image variant fits x = Rodbard(y), i.e. the inverse curve
cf.do_fit(FitType.RODBARD2)
print("R^2 (Rodbard NIH Image):", cf.get_r_squared())
print("signal at concentration 10:", cf.f(10.0))

import numpy as np

from model import AffineTransformation2D
from solver.solver_engine import SolverEngine


class SolverAffineThreePoint(SolverEngine):
    """ 三点法求解二维仿射变换 """

    def sampleSize(self):
        return 3

    def estimateModel(self, inputs, outputs, sample):
        if sample is None:
            sample = [i for i in range(np.shape(inputs)[0])]
        sources = inputs[sample]
        destinations = outputs[sample]

        # 每个点对给出 x 和 y 两个方程，两组方程共用系数矩阵 [x y 1]
        coefficients = np.c_[sources, np.ones(len(sample))]
        if not np.all(np.isfinite(coefficients)) or not np.all(np.isfinite(destinations)):
            return []
        try:
            singular_values = np.linalg.svd(coefficients, compute_uv=False)
            if singular_values[-1] <= 1e-10 * singular_values[0]:
                return []  # 三点共线
            solution = np.linalg.lstsq(coefficients, destinations, rcond=None)[0]
        except np.linalg.LinAlgError:
            return []
        return [AffineTransformation2D(solution.T)]

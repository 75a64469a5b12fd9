import numpy as np

from model import ProjectiveTransformation3D
from solver.solver_engine import SolverEngine


class SolverProjective3DFivePoint(SolverEngine):
    """ 五点法求解三维射影变换（15 自由度） """

    def sampleSize(self):
        return 5

    def estimateModel(self, inputs, outputs, sample):
        if sample is None:
            sample = [i for i in range(np.shape(inputs)[0])]

        # 由 X' ~ T X 消去尺度，每个点对给出三个方程
        rows = []
        for sample_idx in sample:
            X = np.r_[inputs[sample_idx], 1.0]
            x, y, z = outputs[sample_idx]
            zero = np.zeros(4)
            rows.append(np.r_[X, zero, zero, -x * X])
            rows.append(np.r_[zero, X, zero, -y * X])
            rows.append(np.r_[zero, zero, X, -z * X])
        A = np.array(rows)
        if not np.all(np.isfinite(A)):
            return []

        try:
            _, singular_values, vt = np.linalg.svd(A)
        except np.linalg.LinAlgError:
            return []

        # 零空间维数大于 1 说明样本退化
        if len(singular_values) >= 15 and singular_values[14] <= 1e-10 * singular_values[0]:
            return []
        matrix = vt[-1].reshape((4, 4))
        if abs(np.linalg.det(matrix)) <= np.finfo(float).eps * np.linalg.norm(matrix) ** 4:
            return []
        return [ProjectiveTransformation3D(matrix)]

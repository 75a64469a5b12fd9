import numpy as np

from model import PinholeCamera
from solver.solver_engine import SolverEngine


class SolverPinholeCameraDLT(SolverEngine):
    """ 直接线性变换（DLT）由 3D-2D 点对求解针孔相机投影矩阵 """

    def sampleSize(self):
        """ 12 个未知数减去尺度，每个点对给出两个方程 """
        return 6

    def estimateModel(self, inputs, outputs, sample):
        """ 从给定的样本点求解投影矩阵

        参数
        ----------
        inputs : numpy
            世界坐标点 (n, 3)
        outputs : numpy
            图像点 (n, 2)
        sample : list
            用于估计模型的样本点序号列表，None 表示使用全部点

        返回
        ----------
        list(Model)
            通过样本估计的模型列表
        """
        if sample is None:
            sample = [i for i in range(np.shape(inputs)[0])]

        rows = []
        for sample_idx in sample:
            X = np.r_[inputs[sample_idx], 1.0]
            u, v = outputs[sample_idx]
            zero = np.zeros(4)
            rows.append(np.r_[X, zero, -u * X])
            rows.append(np.r_[zero, X, -v * X])
        A = np.array(rows)
        if not np.all(np.isfinite(A)):
            return []

        try:
            _, singular_values, vt = np.linalg.svd(A)
        except np.linalg.LinAlgError:
            return []

        # 零空间维数大于 1 （例如所有点共面）说明样本退化
        if singular_values[10] <= 1e-10 * singular_values[0]:
            return []
        matrix = vt[-1].reshape((3, 4))
        if abs(np.linalg.det(matrix[:, :3])) <= np.finfo(float).eps * np.linalg.norm(matrix) ** 3:
            return []
        return [PinholeCamera(matrix)]

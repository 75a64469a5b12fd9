import numpy as np

from model import Point2D, Point3D
from solver.solver_engine import SolverEngine


class SolverPointTwoLines(SolverEngine):
    """ 两条直线求交点，直线以 (a, b, c) 表示 ax + by + c = 0 """

    def sampleSize(self):
        return 2

    def estimateModel(self, inputs, outputs, sample):
        lines = inputs if sample is None else inputs[sample]
        if not np.all(np.isfinite(lines)):
            return []
        if np.shape(lines)[0] != 2:
            # 非最小样本：最小二乘求解
            return self.__leastSquares(lines)
        # 齐次坐标下两直线的交点为叉积
        point = np.cross(lines[0], lines[1])
        scale = np.linalg.norm(lines[0, :2]) * np.linalg.norm(lines[1, :2])
        if abs(point[2]) <= 1e-12 * scale:
            return []  # 平行线没有交点
        return [Point2D(point[:2] / point[2])]

    def __leastSquares(self, lines):
        A = lines[:, :2]
        try:
            if np.linalg.matrix_rank(A) < 2:
                return []
            x = np.linalg.lstsq(A, -lines[:, 2], rcond=None)[0]
        except np.linalg.LinAlgError:
            return []
        return [Point2D(x)]


class SolverPointThreePlanes(SolverEngine):
    """ 三个平面求交点，平面以 (a, b, c, d) 表示 ax + by + cz + d = 0 """

    def sampleSize(self):
        return 3

    def estimateModel(self, inputs, outputs, sample):
        planes = inputs if sample is None else inputs[sample]
        if not np.all(np.isfinite(planes)):
            return []
        A = planes[:, :3]
        b = -planes[:, 3]
        try:
            # 法向量线性相关时平面没有唯一交点
            singular_values = np.linalg.svd(A, compute_uv=False)
            if singular_values[-1] <= 1e-12 * singular_values[0]:
                return []
            if np.shape(planes)[0] == 3:
                return [Point3D(np.linalg.solve(A, b))]
            return [Point3D(np.linalg.lstsq(A, b, rcond=None)[0])]
        except np.linalg.LinAlgError:
            return []

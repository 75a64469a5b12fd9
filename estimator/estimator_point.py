import numpy as np

from model import Point2D, Point3D
from .estimator import Estimator
from solver.solver_point_intersection import SolverPointThreePlanes, SolverPointTwoLines


class EstimatorPoint2D(Estimator):
    """ 由直线集合估计二维交点，直线以 (a, b, c) 表示 """

    def __init__(self, minimalSolver=SolverPointTwoLines):
        super().__init__()
        self.minimal_solver = minimalSolver()

    def sampleSize(self):
        return self.minimal_solver.sampleSize()

    def estimateModel(self, inputs, outputs, sample):
        return self.minimal_solver.estimateModel(inputs, None, sample)

    def residualVectors(self, inputs, outputs, model):
        """ 点到直线的距离 """
        x, y = model.descriptor
        norms = np.sqrt(inputs[:, 0] ** 2 + inputs[:, 1] ** 2)
        with np.errstate(divide='ignore', invalid='ignore'):
            distances = (inputs[:, 0] * x + inputs[:, 1] * y + inputs[:, 2]) / norms
        return distances.reshape(-1, 1)

    def parametersToModel(self, parameters):
        return Point2D(parameters)


class EstimatorPoint3D(Estimator):
    """ 由平面集合估计三维交点，平面以 (a, b, c, d) 表示 """

    def __init__(self, minimalSolver=SolverPointThreePlanes):
        super().__init__()
        self.minimal_solver = minimalSolver()

    def sampleSize(self):
        return self.minimal_solver.sampleSize()

    def estimateModel(self, inputs, outputs, sample):
        return self.minimal_solver.estimateModel(inputs, None, sample)

    def residualVectors(self, inputs, outputs, model):
        """ 点到平面的距离 """
        norms = np.linalg.norm(inputs[:, :3], axis=1)
        with np.errstate(divide='ignore', invalid='ignore'):
            distances = (inputs[:, :3] @ model.descriptor + inputs[:, 3]) / norms
        return distances.reshape(-1, 1)

    def parametersToModel(self, parameters):
        return Point3D(parameters)

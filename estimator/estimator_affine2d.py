import numpy as np

from model import AffineTransformation2D
from .estimator import Estimator
from solver.solver_affine_three_point import SolverAffineThreePoint


class EstimatorAffine2D(Estimator):
    """ 二维仿射变换估计器 """

    def __init__(self, minimalSolver=SolverAffineThreePoint):
        super().__init__()
        self.minimal_solver = minimalSolver()

    def sampleSize(self):
        return self.minimal_solver.sampleSize()

    def estimateModel(self, inputs, outputs, sample):
        # 仿射变换的线性方程组条件数较好，不需要规范化
        return self.minimal_solver.estimateModel(inputs, outputs, sample)

    def residualVectors(self, inputs, outputs, model):
        return model.transform(inputs) - outputs

    def parametersToModel(self, parameters):
        return AffineTransformation2D(np.asarray(parameters).reshape((2, 3)))

import numpy as np

from model import ProjectiveTransformation3D
from .estimator import Estimator
from solver.solver_projective3d_five_point import SolverProjective3DFivePoint
from utils.normalization import normalizePoints


class EstimatorProjective3D(Estimator):
    """ 三维射影变换估计器 """

    def __init__(self, minimalSolver=SolverProjective3DFivePoint):
        super().__init__()
        self.minimal_solver = minimalSolver()

    def sampleSize(self):
        return self.minimal_solver.sampleSize()

    def estimateModel(self, inputs, outputs, sample):
        if not self.normalize_points:
            return self.minimal_solver.estimateModel(inputs, outputs, sample)

        normalized_src, transform_source = normalizePoints(inputs[sample])
        normalized_dst, transform_destination = normalizePoints(outputs[sample])
        models = self.minimal_solver.estimateModel(normalized_src, normalized_dst, None)
        for model in models:
            model.descriptor = np.linalg.inv(transform_destination) @ model.descriptor @ transform_source
        return models

    def residualVectors(self, inputs, outputs, model):
        return model.transform(inputs) - outputs

    def modelToParameters(self, model):
        """ 以 t44 = 1 归一化，得到 15 个参数 """
        descriptor = model.descriptor
        if abs(descriptor[3, 3]) < np.finfo(float).eps:
            raise np.linalg.LinAlgError('t44 接近零，无法参数化')
        return np.ravel(descriptor / descriptor[3, 3])[:15]

    def parametersToModel(self, parameters):
        return ProjectiveTransformation3D(np.r_[parameters, 1.0].reshape((4, 4)))

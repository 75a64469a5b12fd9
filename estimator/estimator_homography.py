import numpy as np

from model import Homography
from .estimator import Estimator
from solver.solver_homography_four_point import SolverHomographyFourPoint
from utils.normalization import normalizePoints


class EstimatorHomography(Estimator):
    """ 单应矩阵（二维射影变换）估计器 """

    def __init__(self, minimalSolver=SolverHomographyFourPoint):
        super().__init__()
        # 用于估计最小样本模型的估计器
        self.minimal_solver = minimalSolver()

    def sampleSize(self):
        """ 估计模型所需的最小样本的大小 """
        return self.minimal_solver.sampleSize()

    def estimateModel(self, inputs, outputs, sample):
        """ 给定一组数据点，估计最小样本模型

        参数
        ----------
        inputs : numpy
            源图像点集 (N, 2)
        outputs : numpy
            目标图像点集 (N, 2)
        sample : list
            用于估计模型的样本点序号列表

        返回
        ----------
        list(Model)
            通过样本估计的模型列表
        """
        if not self.normalize_points:
            return self.minimal_solver.estimateModel(inputs, outputs, sample)

        # 对点坐标进行归一化以实现数值稳定性
        normalized_src, normalizing_transform_source = normalizePoints(inputs[sample])
        normalized_dst, normalizing_transform_destination = normalizePoints(outputs[sample])
        models = self.minimal_solver.estimateModel(normalized_src, normalized_dst, None)
        # 单应矩阵的反归一化
        for model in models:
            model.descriptor = np.linalg.inv(normalizing_transform_destination) @ \
                model.descriptor @ normalizing_transform_source
        return models

    def residualVectors(self, inputs, outputs, model):
        """ 源点经模型变换后与目标点的坐标差 """
        return model.transform(inputs) - outputs

    def isValidSample(self, inputs, outputs, sample):
        """ 在计算模型参数之前判断所选样本是否退化，检查四个点对的朝向约束

        参数
        ----------
        inputs : numpy
            源图像点集
        outputs : numpy
            目标图像点集
        sample : list
            用于估计模型的样本点序号列表

        返回
        ----------
        bool
            样本是否有效
        """
        if not super().isValidSample(inputs, outputs, sample):
            return False
        a, b, c, d = [np.r_[inputs[i], outputs[i]] for i in sample[:4]]

        p = self.__cross_product(a[0:2], b[0:2])
        q = self.__cross_product(a[2:4], b[2:4])
        if (p[0] * c[0] + p[1] * c[1] + p[2]) * (q[0] * c[2] + q[1] * c[3] + q[2]) < 0:
            return False
        if (p[0] * d[0] + p[1] * d[1] + p[2]) * (q[0] * d[2] + q[1] * d[3] + q[2]) < 0:
            return False

        p = self.__cross_product(c[0:2], d[0:2])
        q = self.__cross_product(c[2:4], d[2:4])
        if (p[0] * a[0] + p[1] * a[1] + p[2]) * (q[0] * a[2] + q[1] * a[3] + q[2]) < 0:
            return False
        if (p[0] * b[0] + p[1] * b[1] + p[2]) * (q[0] * b[2] + q[1] * b[3] + q[2]) < 0:
            return False

        return True

    def modelToParameters(self, model):
        """ 以 h33 = 1 归一化，得到 8 个参数 """
        descriptor = model.descriptor
        if abs(descriptor[2, 2]) < np.finfo(float).eps:
            raise np.linalg.LinAlgError('h33 接近零，无法参数化')
        return np.ravel(descriptor / descriptor[2, 2])[:8]

    def parametersToModel(self, parameters):
        return Homography(np.r_[parameters, 1.0].reshape((3, 3)))

    def __cross_product(self, vector1, vector2):
        """ 计算过两点的直线 """
        result = np.zeros(3)
        result[0] = vector1[1] - vector2[1]
        result[1] = vector2[0] - vector1[0]
        result[2] = vector1[0] * vector2[1] - vector1[1] * vector2[0]
        return result

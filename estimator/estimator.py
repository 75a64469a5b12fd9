import numpy as np


class Estimator:
    """ 模型估计器基类

    估计器负责从最小样本拟合候选模型、计算残差，并为非线性精化提供模型参数化
    """

    def __init__(self):
        self.normalize_points = True  # 最小样本求解前是否对点坐标进行规范化

    def setNormalizePoints(self, normalize_points):
        self.normalize_points = normalize_points

    def sampleSize(self):
        """ 估计模型所需的最小样本的大小 """
        pass

    def estimateModel(self, inputs, outputs, sample):
        """ 给定一组数据点，估计最小样本模型

        参数
        ----------
        inputs : numpy
            输入序列
        outputs : numpy
            输出序列，单序列问题为 None
        sample : list
            用于估计模型的样本点序号列表

        返回
        ----------
        list(Model)
            通过样本估计的模型列表，样本退化时为空列表
        """
        pass

    def residualVectors(self, inputs, outputs, model):
        """ 给定模型和数据点，计算每个点的误差向量 (N, d) """
        pass

    def residuals(self, inputs, outputs, model):
        """ 给定模型和数据点，计算每个点的误差（误差向量的模） """
        vectors = self.residualVectors(inputs, outputs, model)
        with np.errstate(invalid='ignore', over='ignore'):
            residuals = np.sqrt(np.sum(vectors ** 2, axis=1))
        residuals[~np.isfinite(residuals)] = np.inf
        return residuals

    def signedResiduals(self, inputs, outputs, model):
        """ 展开为一维的误差向量，用于最小二乘精化 """
        return np.ravel(self.residualVectors(inputs, outputs, model))

    def isValidSample(self, inputs, outputs, sample):
        """ 在计算模型参数之前判断所选样本是否退化

        参数
        ----------
        inputs : numpy
            输入序列
        outputs : numpy
            输出序列
        sample : list
            用于估计模型的样本点序号列表

        返回
        ----------
        bool
            样本是否有效
        """
        return len(set(sample)) == self.sampleSize()

    def modelToParameters(self, model):
        """ 模型转为精化使用的参数向量 """
        return np.ravel(model.descriptor).astype(float)

    def parametersToModel(self, parameters):
        """ 参数向量转为模型 """
        pass

import numpy as np


class Score:
    """ 模型评估得分，value 越大模型越好 """

    def __init__(self):
        self.inlier_number = 0           # 内点数目
        self.value = 0.0                 # 得分
        self.residual_sum = 0.0          # 内点残差平方和，得分相同时越小越好
        self.estimated_threshold = None  # 中值类方法估计的内点阈值

    def __lt__(self, v):
        return v.__gt__(self)

    def __gt__(self, v):
        if self.value != v.value:
            return self.value > v.value
        return self.residual_sum < v.residual_sum

    def __eq__(self, v):
        return self.value == v.value and self.residual_sum == v.residual_sum

    def __repr__(self):
        return f'Score(value={self.value}, inlier_number={self.inlier_number})'


class RansacScoringFunction:
    """ RANSAC 评分：残差不大于阈值的点为内点，得分为内点数目 """

    def __init__(self):
        self.threshold = 0.0
        self.point_number = 0

    def initialize(self, threshold, point_number):
        self.threshold = threshold
        self.point_number = point_number

    def getScore(self, residuals):
        """ 求解模型对应的评估得分

        参数
        ----------
        residuals : numpy
            每个对应点相对当前模型的残差

        返回
        ----------
        Score, numpy
            当前模型参数的评估得分
            当前模型参数的内点 mask
        """
        inliers = residuals <= self.threshold
        score = Score()
        score.inlier_number = int(np.count_nonzero(inliers))
        score.value = float(score.inlier_number)
        return score, inliers


class ProsacScoringFunction(RansacScoringFunction):
    """ PROSAC 评分：与 RANSAC 相同，内点数目相同时残差平方和较小的模型更好 """

    def getScore(self, residuals):
        score, inliers = super().getScore(residuals)
        score.residual_sum = float(np.sum(residuals[inliers] ** 2))
        return score, inliers


class MSACScoringFunction:
    """ MSAC 评分：截断二次损失 sum(min(r^2, t^2))，损失越小越好 """

    def __init__(self):
        self.threshold = 0.0
        self.squared_truncated_threshold = 0.0
        self.point_number = 0

    def initialize(self, threshold, point_number):
        self.threshold = threshold
        self.squared_truncated_threshold = threshold ** 2
        self.point_number = point_number

    def getScore(self, residuals):
        squared_residuals = residuals ** 2
        inliers = residuals <= self.threshold
        score = Score()
        score.inlier_number = int(np.count_nonzero(inliers))
        # 外点贡献固定的 t^2，内点贡献各自的 r^2
        score.value = -float(np.sum(np.minimum(squared_residuals,
                                               self.squared_truncated_threshold)))
        return score, inliers


class LMedSScoringFunction:
    """ LMedS 评分：残差平方的中值越小越好，由中值估计内点阈值 """

    MAD_CONSTANT = 1.4826

    def __init__(self):
        self.stop_threshold = 0.0
        self.inlier_factor = 1.5
        self.point_number = 0
        self.sample_size = 0

    def initialize(self, stop_threshold, point_number, sample_size, inlier_factor):
        self.stop_threshold = stop_threshold
        self.point_number = point_number
        self.sample_size = sample_size
        self.inlier_factor = inlier_factor

    def estimateThreshold(self, median_squared_residual):
        """ 由残差平方中值估计内点阈值（鲁棒标准差乘以 inlier_factor） """
        if self.point_number > self.sample_size:
            correction = 1.0 + 5.0 / (self.point_number - self.sample_size)
        else:
            correction = 1.0
        return self.inlier_factor * self.MAD_CONSTANT * correction * \
            np.sqrt(median_squared_residual)

    def getScore(self, residuals):
        squared_residuals = residuals ** 2
        median = float(np.median(squared_residuals))
        if not np.isfinite(median):
            median = np.inf

        score = Score()
        score.value = -median
        score.estimated_threshold = float(self.estimateThreshold(median))
        inliers = residuals <= max(score.estimated_threshold, self.stop_threshold)
        score.inlier_number = int(np.count_nonzero(inliers))
        return score, inliers

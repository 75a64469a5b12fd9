from enum import Enum

import numpy as np
from scipy.stats import binom

from .iteration import computeRequiredIterations
from sampler import ProsacSampler, UniformSampler
from utils.score import (LMedSScoringFunction, MSACScoringFunction,
                         ProsacScoringFunction, RansacScoringFunction)


class RobustEstimatorMethod(Enum):
    RANSAC = 'ransac'
    LMEDS = 'lmeds'
    MSAC = 'msac'
    PROSAC = 'prosac'
    PROMEDS = 'promeds'


class MethodStrategy:
    """ 鲁棒估计方法的策略基类，决定采样器、评分规则、迭代上限和终止条件 """

    method = None
    requires_quality_scores = False

    def __init__(self):
        self.settings = None
        self.sampler = None
        self.point_number = 0
        self.sample_size = 0

    def initialize(self, settings, point_number, sample_size, quality_scores=None):
        """ 每次估计开始时调用 """
        self.settings = settings
        self.point_number = point_number
        self.sample_size = sample_size

    def createSampler(self, quality_scores=None):
        self.sampler = UniformSampler(self.point_number, self.sample_size)
        return self.sampler

    def createScoringFunction(self):
        scoring_function = RansacScoringFunction()
        scoring_function.initialize(self.settings.threshold, self.point_number)
        return scoring_function

    def supportForIterations(self, inliers, residuals):
        """ 用于估计迭代上限的支持集 mask """
        return inliers

    def requiredIterations(self, score, inliers, residuals):
        """ 找到更好的模型后的自适应迭代上限 """
        support = self.supportForIterations(inliers, residuals)
        return computeRequiredIterations(int(np.count_nonzero(support)),
                                         self.point_number,
                                         self.sample_size,
                                         self.settings.confidence,
                                         self.settings.max_iterations)

    def isFinished(self, score):
        """ 是否可以提前结束迭代 """
        return False

    def refinementStandardDeviation(self, score):
        return self.settings.threshold


class RansacMethod(MethodStrategy):
    method = RobustEstimatorMethod.RANSAC


class MSACMethod(MethodStrategy):
    method = RobustEstimatorMethod.MSAC

    def createScoringFunction(self):
        scoring_function = MSACScoringFunction()
        scoring_function.initialize(self.settings.threshold, self.point_number)
        return scoring_function


class LMedSMethod(MethodStrategy):
    method = RobustEstimatorMethod.LMEDS

    def createScoringFunction(self):
        scoring_function = LMedSScoringFunction()
        scoring_function.initialize(self.settings.stop_threshold,
                                    self.point_number,
                                    self.sample_size,
                                    self.settings.inlier_factor)
        return scoring_function

    def supportForIterations(self, inliers, residuals):
        # 中值阈值随模型变差而增大，迭代上限只使用固定的终止阈值
        return residuals <= self.settings.stop_threshold

    def isFinished(self, score):
        # 估计的阈值已经足够小
        return score.estimated_threshold <= self.settings.stop_threshold

    def refinementStandardDeviation(self, score):
        return score.estimated_threshold


class ProsacMethod(MethodStrategy):
    """ PROSAC：按质量评分渐进采样，使用非随机性和最大性准则决定迭代上限 """

    method = RobustEstimatorMethod.PROSAC
    requires_quality_scores = True

    BETA = 0.01  # 随机模型下外点被判为内点的概率
    PSI = 0.05   # 非随机性检验的显著性水平

    def __init__(self):
        super().__init__()
        self.sorted_indices = None
        self.minimum_inliers = None  # I_min(n)，n = M...N

    def initialize(self, settings, point_number, sample_size, quality_scores=None):
        super().initialize(settings, point_number, sample_size, quality_scores)
        self.sorted_indices = np.argsort(-np.asarray(quality_scores, dtype=float), kind='stable')
        # 非随机性: 随机模型在前 n 个点中得到 I_min(n) 个以上内点的概率小于 PSI
        subset_sizes = np.arange(sample_size, point_number + 1)
        minimum_inliers = sample_size + 1 + \
            binom.ppf(1.0 - self.PSI, subset_sizes - sample_size, self.BETA)
        self.minimum_inliers = np.where(np.isfinite(minimum_inliers), minimum_inliers, np.inf)

    def createSampler(self, quality_scores=None):
        self.sampler = ProsacSampler(quality_scores, self.sample_size,
                                     ransac_convergence_iterations=self.settings.max_iterations)
        return self.sampler

    def createScoringFunction(self):
        scoring_function = ProsacScoringFunction()
        scoring_function.initialize(self.settings.threshold, self.point_number)
        return scoring_function

    def requiredIterations(self, score, inliers, residuals):
        """ 在满足非随机性的子集 U_n* 中选取所需迭代次数最少的 n*

        只考虑不小于当前采样子集的 n*，此前的样本全部取自 U_n*。n* < N 时，
        所需的样本数还必须在采样子集超出 n* 之前取得
        """
        standard = super().requiredIterations(score, inliers, residuals)
        support = self.supportForIterations(inliers, residuals)
        sorted_support = np.cumsum(support[self.sorted_indices])
        sampler = self.sampler
        convergence_iterations = sampler.ransac_convergence_iterations

        best = standard
        for n in range(max(sampler.subset_size, self.sample_size), self.point_number):
            count = int(sorted_support[n - 1])
            if count < self.minimum_inliers[n - self.sample_size]:
                continue
            required = computeRequiredIterations(count, n,
                                                 self.sample_size,
                                                 self.settings.confidence,
                                                 self.settings.max_iterations)
            # 第 growth_function[n-1] 次迭代之后采样子集超出 U_n
            if required > min(sampler.growth_function[n - 1], convergence_iterations):
                continue
            best = min(best, required)
        return best


class PROMedSMethod(ProsacMethod):
    """ PROMedS：渐进采样加上 LMedS 评分 """

    method = RobustEstimatorMethod.PROMEDS

    def createScoringFunction(self):
        scoring_function = LMedSScoringFunction()
        scoring_function.initialize(self.settings.stop_threshold,
                                    self.point_number,
                                    self.sample_size,
                                    self.settings.inlier_factor)
        return scoring_function

    def supportForIterations(self, inliers, residuals):
        return residuals <= self.settings.stop_threshold

    def isFinished(self, score):
        return score.estimated_threshold <= self.settings.stop_threshold

    def refinementStandardDeviation(self, score):
        return score.estimated_threshold


_METHODS = {
    RobustEstimatorMethod.RANSAC: RansacMethod,
    RobustEstimatorMethod.LMEDS: LMedSMethod,
    RobustEstimatorMethod.MSAC: MSACMethod,
    RobustEstimatorMethod.PROSAC: ProsacMethod,
    RobustEstimatorMethod.PROMEDS: PROMedSMethod,
}


def createMethodStrategy(method):
    """ 创建鲁棒估计方法对应的策略 """
    if not isinstance(method, RobustEstimatorMethod):
        try:
            method = RobustEstimatorMethod(str(method).lower())
        except ValueError as e:
            raise ValueError(f'未知的鲁棒估计方法: {method}') from e
    return _METHODS[method]()

import logging
import math as m
import sys
from enum import Enum

logger = logging.getLogger(__name__)


class IterationState(Enum):
    RUNNING = 0
    CONVERGED = 1
    EXHAUSTED_ITERATIONS = 2
    FAILED = 3


def computeRequiredIterations(inlier_number,
                              point_number,
                              sample_size,
                              confidence,
                              max_iterations):
    """ 计算在给定置信率下找到无外点样本所需的迭代次数

    参数
    ----------
    inlier_number : int
        当前最佳模型的内点数目
    point_number : int
        对应点集的数目
    sample_size : int
        最小样本大小 M
    confidence : float
        结果的置信率 [0, 1]
    max_iterations : int
        最大迭代次数

    返回
    ----------
    int
        所需迭代次数，限制在 [1, max_iterations]
    """
    if inlier_number <= 0 or point_number <= 0:
        return max_iterations
    inlier_ratio = float(inlier_number) / point_number  # η
    if inlier_ratio >= 1.0:
        return 1
    if confidence >= 1.0:
        return max_iterations
    if confidence <= 0.0:
        return 1

    probability = inlier_ratio ** sample_size
    if probability < sys.float_info.epsilon:
        return max_iterations
    log1 = m.log(1.0 - confidence)
    log2 = m.log(1.0 - probability)
    required = m.ceil(log1 / log2)
    return max(1, min(required, max_iterations))


class IterationController:
    """ 迭代控制器：记录迭代次数、自适应迭代上限和进度 """

    def __init__(self, max_iterations, progress_delta):
        self.max_iterations = max_iterations
        self.progress_delta = progress_delta
        self.reset()

    def reset(self):
        self.iteration = 0
        self.required_iterations = self.max_iterations
        self.state = IterationState.RUNNING
        self.progress = 0.0
        self.previous_progress = 0.0

    def shouldContinue(self):
        return self.state == IterationState.RUNNING and \
            self.iteration < min(self.required_iterations, self.max_iterations)

    def nextIteration(self):
        self.iteration += 1
        return self.iteration

    def updateRequiredIterations(self, required_iterations):
        """ 找到更好的模型后更新自适应迭代上限 """
        self.required_iterations = max(1, min(required_iterations, self.max_iterations))
        logger.debug('迭代 %d: 所需迭代次数更新为 %d',
                     self.iteration, self.required_iterations)

    def updateProgress(self):
        """ 更新进度，进度增量超过 progress_delta 时返回 True """
        self.progress = min(1.0, float(self.iteration) / self.required_iterations)
        if self.progress - self.previous_progress > self.progress_delta:
            self.previous_progress = self.progress
            return True
        return False

    def converge(self):
        self.state = IterationState.CONVERGED

    def exhaust(self):
        self.state = IterationState.EXHAUSTED_ITERATIONS

    def fail(self):
        self.state = IterationState.FAILED

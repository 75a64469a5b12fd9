import logging

import numpy as np

from .correspondences import CorrespondenceStore
from .inliers import InliersData
from .iteration import IterationController, IterationState
from .methods import RobustEstimatorMethod, createMethodStrategy
from refiner import ModelRefiner
from utils.exceptions import (LockedException, NotReadyException, RefinerException,
                              RobustEstimatorException)

logger = logging.getLogger(__name__)


class _Settings:

    def __init__(self):
        self.threshold = 1.0                    # 决定内点和外点的阈值 (RANSAC/MSAC/PROSAC)
        self.stop_threshold = 1e-3              # 中值类方法提前终止的阈值 (LMedS/PROMedS)
        self.inlier_factor = 1.5                # 中值类方法估计阈值的系数
        self.confidence = 0.99                  # 结果的置信率
        self.max_iterations = 5000              # 最大迭代次数
        self.progress_delta = 0.05              # 进度通知的最小增量

        self.refine_result = True               # 是否在内点上精化结果
        self.use_fast_refinement = False        # 是否使用快速精化
        self.keep_covariance = False            # 是否估计精化结果的协方差
        self.compute_and_keep_inliers = False   # 是否保留内点 mask
        self.compute_and_keep_residuals = False # 是否保留残差


class _Statistics:

    def __init__(self):
        self.iteration_number = 0
        self.degenerate_sample_number = 0
        self.model_number = 0
        self.state = IterationState.RUNNING


class RobustEstimator:
    """ 通用鲁棒估计引擎

    从含有未知比例外点的对应点集中估计模型，支持 RANSAC, LMedS, MSAC, PROSAC, PROMedS
    五种方法。具体模型由注入的 Estimator 负责最小样本拟合、残差计算和参数化。
    """

    def __init__(self,
                 estimator,
                 inputs=None,
                 outputs=None,
                 quality_scores=None,
                 listener=None,
                 method=RobustEstimatorMethod.PROMEDS):
        """ 初始化鲁棒估计器

        参数
        ----------
        estimator : Estimator
            模型的估计器
        inputs : array_like 可选
            输入序列
        outputs : array_like 可选
            输出序列，单序列问题为 None
        quality_scores : array_like 可选
            质量评分，PROSAC 和 PROMedS 必需
        listener : RobustEstimatorListener 可选
            估计过程监听器
        method : RobustEstimatorMethod 可选
            鲁棒估计方法

        异常
        ----------
        ValueError
            输入序列长度不足、长度不一致或质量评分长度与对应点数目不同
        """
        self.settings = _Settings()
        self.statistics = _Statistics()

        self.estimator = estimator
        self.strategy = createMethodStrategy(method)
        self.correspondences = CorrespondenceStore(estimator.sampleSize())
        self.listener = listener

        self.locked = False
        self.inliers_data = None
        self.covariance = None
        self.refinement_standard_deviation = None

        if inputs is not None:
            self.correspondences.setCorrespondences(inputs, outputs)
        if quality_scores is not None:
            if inputs is not None and len(quality_scores) != self.correspondences.point_number:
                raise ValueError('质量评分数目必须与对应点数目相同')
            self.correspondences.setQualityScores(quality_scores)

    def isLocked(self):
        return self.locked

    def _checkLocked(self):
        if self.locked:
            raise LockedException('估计器已锁定，估计过程中不能修改参数')

    def getMethod(self):
        return self.strategy.method

    def sampleSize(self):
        return self.estimator.sampleSize()

    # ----- 参数设置 -----

    def setCorrespondences(self, inputs, outputs=None):
        self._checkLocked()
        self.correspondences.setCorrespondences(inputs, outputs)

    def setQualityScores(self, quality_scores):
        self._checkLocked()
        self.correspondences.setQualityScores(quality_scores)

    def setListener(self, listener):
        self._checkLocked()
        self.listener = listener

    def setThreshold(self, threshold):
        self._checkLocked()
        if not threshold > 0.0:
            raise ValueError('阈值必须大于零')
        self.settings.threshold = threshold

    def setStopThreshold(self, stop_threshold):
        self._checkLocked()
        if not stop_threshold > 0.0:
            raise ValueError('终止阈值必须大于零')
        self.settings.stop_threshold = stop_threshold

    def setInlierFactor(self, inlier_factor):
        self._checkLocked()
        if not inlier_factor > 0.0:
            raise ValueError('内点系数必须大于零')
        self.settings.inlier_factor = inlier_factor

    def setConfidence(self, confidence):
        self._checkLocked()
        if not 0.0 <= confidence <= 1.0:
            raise ValueError('置信率必须在 [0, 1] 之间')
        self.settings.confidence = confidence

    def setMaxIterations(self, max_iterations):
        self._checkLocked()
        if max_iterations < 1:
            raise ValueError('最大迭代次数必须至少为 1')
        self.settings.max_iterations = int(max_iterations)

    def setProgressDelta(self, progress_delta):
        self._checkLocked()
        if not 0.0 <= progress_delta <= 1.0:
            raise ValueError('进度增量必须在 [0, 1] 之间')
        self.settings.progress_delta = progress_delta

    def setResultRefined(self, refine_result):
        self._checkLocked()
        self.settings.refine_result = refine_result

    def setFastRefinementUsed(self, use_fast_refinement):
        self._checkLocked()
        self.settings.use_fast_refinement = use_fast_refinement

    def setCovarianceKept(self, keep_covariance):
        self._checkLocked()
        self.settings.keep_covariance = keep_covariance

    def setComputeAndKeepInliersEnabled(self, compute_and_keep_inliers):
        self._checkLocked()
        self.settings.compute_and_keep_inliers = compute_and_keep_inliers

    def setComputeAndKeepResidualsEnabled(self, compute_and_keep_residuals):
        self._checkLocked()
        self.settings.compute_and_keep_residuals = compute_and_keep_residuals

    def setNormalizeSubsetPointCorrespondences(self, normalize):
        self._checkLocked()
        self.estimator.setNormalizePoints(normalize)

    # ----- 状态查询 -----

    def isReady(self):
        return self.correspondences.isReady(self.strategy.requires_quality_scores)

    def getInliersData(self):
        return self.inliers_data

    def getCovariance(self):
        return self.covariance

    def getRefinementStandardDeviation(self):
        """ 最近一次估计的精化标准差，尚未估计时为 None """
        return self.refinement_standard_deviation

    # ----- 估计 -----

    def estimate(self):
        """ 运行鲁棒估计

        返回
        ----------
        Model
            估计得到的最佳模型（启用时为精化后的模型）

        异常
        ----------
        LockedException
            估计过程中再次调用
        NotReadyException
            输入数据不完整
        RobustEstimatorException
            迭代次数耗尽未找到有效模型，或数值计算失败
        """
        self._checkLocked()
        if not self.isReady():
            raise NotReadyException('估计器尚未准备好，缺少对应点或质量评分')

        self.locked = True
        try:
            self.inliers_data = None
            self.covariance = None
            self.refinement_standard_deviation = None
            self.statistics = _Statistics()

            if self.listener is not None:
                self.listener.onEstimateStart(self)

            model, score, inliers, residuals = self.__runSampleConsensus()
            sigma = self.strategy.refinementStandardDeviation(score)
            self.refinement_standard_deviation = sigma

            keep_inliers = self.settings.compute_and_keep_inliers or self.settings.refine_result
            keep_residuals = self.settings.compute_and_keep_residuals or self.settings.refine_result
            self.inliers_data = InliersData(score.inlier_number,
                                            inliers=inliers if keep_inliers else None,
                                            residuals=residuals if keep_residuals else None,
                                            estimated_threshold=score.estimated_threshold)

            if self.settings.refine_result:
                model = self._refine(model, inliers, sigma)

            if self.listener is not None:
                self.listener.onEstimateEnd(self)

            logger.debug('%s 估计完成: 迭代 %d 次, 内点 %d/%d',
                         self.strategy.method.name, self.statistics.iteration_number,
                         score.inlier_number, self.correspondences.point_number)
            return model
        finally:
            self.locked = False

    def _createRefiner(self):
        return ModelRefiner(self.estimator,
                            fast_refinement=self.settings.use_fast_refinement,
                            keep_covariance=self.settings.keep_covariance)

    def _refine(self, model, inliers, standard_deviation):
        """ 在内点集上精化模型，精化失败时返回原模型 """
        refiner = self._createRefiner()
        inputs, outputs = self.correspondences.select(inliers)
        try:
            refined = refiner.refine(model, inputs, outputs, standard_deviation)
        except RefinerException as e:
            logger.warning('模型精化失败，返回未精化的模型: %s', e)
            return model
        if self.settings.keep_covariance:
            self.covariance = refiner.covariance
        return refined

    def __runSampleConsensus(self):
        """ 运行采样一致性主循环

        返回
        ----------
        Model, Score, numpy, numpy
            最佳模型，得分，内点 mask，残差
        """
        correspondences = self.correspondences
        inputs, outputs = correspondences.inputs, correspondences.outputs
        point_number = correspondences.point_number
        sample_size = self.estimator.sampleSize()

        strategy = self.strategy
        strategy.initialize(self.settings, point_number, sample_size,
                            quality_scores=correspondences.quality_scores)
        sampler = strategy.createSampler(correspondences.quality_scores)
        scoring_function = strategy.createScoringFunction()
        controller = IterationController(self.settings.max_iterations,
                                         self.settings.progress_delta)

        # 记录全局的最佳模型，得分，内点集合
        so_far_the_best_model = None
        so_far_the_best_score = None
        so_far_the_best_inliers = None
        so_far_the_best_residuals = None

        logger.debug('%s 估计开始: %d 个对应点, 最小样本 %d',
                     strategy.method.name, point_number, sample_size)

        while controller.shouldContinue():
            iteration = controller.nextIteration()

            try:
                sample = sampler.sample()
                # 退化的样本同样计入迭代次数
                if len(sample) == 0 or \
                        not self.estimator.isValidSample(inputs, outputs, sample):
                    models = []
                else:
                    try:
                        models = self.estimator.estimateModel(inputs, outputs, sample)
                    except np.linalg.LinAlgError as e:
                        # 数值奇异的样本按退化样本处理
                        logger.debug('第 %d 次迭代的样本数值退化: %s', iteration, e)
                        models = []

                if len(models) == 0:
                    self.statistics.degenerate_sample_number += 1

                for model in models:
                    self.statistics.model_number += 1
                    residuals = self.estimator.residuals(inputs, outputs, model)
                    score, inliers = scoring_function.getScore(residuals)

                    if so_far_the_best_score is None or score > so_far_the_best_score:
                        so_far_the_best_model = model
                        so_far_the_best_score = score
                        so_far_the_best_inliers = inliers
                        so_far_the_best_residuals = residuals
                        # 更新最大迭代数
                        controller.updateRequiredIterations(
                            strategy.requiredIterations(score, inliers, residuals))
                        if strategy.isFinished(score):
                            controller.converge()
            except np.linalg.LinAlgError as e:
                controller.fail()
                self.statistics.state = controller.state
                raise RobustEstimatorException(f'第 {iteration} 次迭代数值计算失败: {e}') from e

            self.statistics.iteration_number = iteration
            if self.listener is not None:
                self.listener.onEstimateNextIteration(self, iteration)
                if controller.updateProgress():
                    self.listener.onEstimateProgressChange(self, controller.progress)

        if so_far_the_best_model is None or so_far_the_best_score.inlier_number < sample_size:
            controller.exhaust()
            self.statistics.state = controller.state
            raise RobustEstimatorException(
                f'{self.statistics.iteration_number} 次迭代后未找到有效模型')

        controller.converge()
        self.statistics.state = controller.state
        return so_far_the_best_model, so_far_the_best_score, \
            so_far_the_best_inliers, so_far_the_best_residuals

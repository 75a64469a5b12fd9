import numpy as np

from .methods import RobustEstimatorMethod
from .robust_estimator import RobustEstimator
from estimator.estimator_pinhole_camera import EstimatorPinholeCamera
from refiner.pinhole_camera_refiner import (PinholeCameraRefiner,
                                            RefinementSuggestions,
                                            rotationToQuaternion)


class PinholeCameraRobustEstimator(RobustEstimator):
    """ 由 3D-2D 点对鲁棒估计针孔相机

    内参未知时使用 DLT，已知内参时使用 EPnP。精化阶段可以对内参、旋转和相机中心
    设置建议值，建议值以逐步增大权重的软约束形式把结果拉向建议值
    """

    def __init__(self,
                 points3d=None,
                 points2d=None,
                 quality_scores=None,
                 listener=None,
                 method=RobustEstimatorMethod.PROMEDS,
                 intrinsic=None):
        super().__init__(EstimatorPinholeCamera(intrinsic),
                         inputs=points3d,
                         outputs=points2d,
                         quality_scores=quality_scores,
                         listener=listener,
                         method=method)
        self.suggestions = RefinementSuggestions()
        self.min_suggestion_weight = PinholeCameraRefiner.DEFAULT_MIN_SUGGESTION_WEIGHT
        self.max_suggestion_weight = PinholeCameraRefiner.DEFAULT_MAX_SUGGESTION_WEIGHT
        self.suggestion_weight_step = PinholeCameraRefiner.DEFAULT_SUGGESTION_WEIGHT_STEP

    def setPoints(self, points3d, points2d):
        self.setCorrespondences(points3d, points2d)

    def setIntrinsic(self, intrinsic):
        """ 设置已知内参，None 表示内参未知 """
        self._checkLocked()
        self.estimator.setIntrinsic(intrinsic)

    def getIntrinsic(self):
        return self.estimator.intrinsic

    def hasSuggestions(self):
        return self.suggestions.hasSuggestions()

    # ----- 建议值 -----

    def setSuggestSkewnessValueEnabled(self, enabled):
        self._checkLocked()
        self.suggestions.suggest_skewness_value_enabled = enabled

    def setSuggestedSkewnessValue(self, value):
        self._checkLocked()
        self.suggestions.suggested_skewness_value = value

    def setSuggestHorizontalFocalLengthEnabled(self, enabled):
        self._checkLocked()
        self.suggestions.suggest_horizontal_focal_length_enabled = enabled

    def setSuggestedHorizontalFocalLengthValue(self, value):
        self._checkLocked()
        self.suggestions.suggested_horizontal_focal_length_value = value

    def setSuggestVerticalFocalLengthEnabled(self, enabled):
        self._checkLocked()
        self.suggestions.suggest_vertical_focal_length_enabled = enabled

    def setSuggestedVerticalFocalLengthValue(self, value):
        self._checkLocked()
        self.suggestions.suggested_vertical_focal_length_value = value

    def setSuggestAspectRatioEnabled(self, enabled):
        self._checkLocked()
        self.suggestions.suggest_aspect_ratio_enabled = enabled

    def setSuggestedAspectRatioValue(self, value):
        self._checkLocked()
        self.suggestions.suggested_aspect_ratio_value = value

    def setSuggestPrincipalPointEnabled(self, enabled):
        self._checkLocked()
        self.suggestions.suggest_principal_point_enabled = enabled
        if enabled and self.suggestions.suggested_principal_point_value is None:
            self.suggestions.suggested_principal_point_value = np.zeros(2)

    def setSuggestedPrincipalPointValue(self, value):
        self._checkLocked()
        self.suggestions.suggested_principal_point_value = np.asarray(value, dtype=float).ravel()[:2]

    def setSuggestRotationEnabled(self, enabled):
        self._checkLocked()
        self.suggestions.suggest_rotation_enabled = enabled
        if enabled and self.suggestions.suggested_rotation_value is None:
            self.suggestions.suggested_rotation_value = np.array([1.0, 0.0, 0.0, 0.0])

    def setSuggestedRotationValue(self, rotation):
        """ 设置建议的旋转，可以是 3x3 旋转矩阵、旋转向量或四元数 (a, b, c, d) """
        self._checkLocked()
        self.suggestions.suggested_rotation_value = rotationToQuaternion(rotation)

    def setSuggestCenterEnabled(self, enabled):
        self._checkLocked()
        self.suggestions.suggest_center_enabled = enabled
        if enabled and self.suggestions.suggested_center_value is None:
            self.suggestions.suggested_center_value = np.zeros(3)

    def setSuggestedCenterValue(self, value):
        self._checkLocked()
        self.suggestions.suggested_center_value = np.asarray(value, dtype=float).ravel()[:3]

    def setMinMaxSuggestionWeight(self, min_suggestion_weight, max_suggestion_weight):
        self._checkLocked()
        if not min_suggestion_weight < max_suggestion_weight:
            raise ValueError('最小建议权重必须小于最大建议权重')
        self.min_suggestion_weight = min_suggestion_weight
        self.max_suggestion_weight = max_suggestion_weight

    def setSuggestionWeightStep(self, suggestion_weight_step):
        self._checkLocked()
        if not suggestion_weight_step > 0.0:
            raise ValueError('建议权重步长必须大于零')
        self.suggestion_weight_step = suggestion_weight_step

    def _createRefiner(self):
        return PinholeCameraRefiner(self.estimator,
                                    self.suggestions,
                                    fast_refinement=self.settings.use_fast_refinement,
                                    keep_covariance=self.settings.keep_covariance,
                                    min_suggestion_weight=self.min_suggestion_weight,
                                    max_suggestion_weight=self.max_suggestion_weight,
                                    suggestion_weight_step=self.suggestion_weight_step)

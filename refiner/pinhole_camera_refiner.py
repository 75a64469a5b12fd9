import logging

import numpy as np
from scipy.spatial.transform import Rotation

from .refiner import ModelRefiner, computeCovariance
from utils.exceptions import RefinerException

logger = logging.getLogger(__name__)


def rotationToQuaternion(rotation):
    """ 旋转矩阵、旋转向量或四元数 (a, b, c, d) 转为单位四元数，a 为实部 """
    rotation = np.asarray(rotation, dtype=float)
    if rotation.shape == (3, 3):
        x, y, z, w = Rotation.from_matrix(rotation).as_quat()
    elif rotation.shape == (3,):
        x, y, z, w = Rotation.from_rotvec(rotation).as_quat()
    elif rotation.shape == (4,):
        w, x, y, z = rotation / np.linalg.norm(rotation)
    else:
        raise ValueError(f'无法识别的旋转表示，形状为 {rotation.shape}')
    return np.array([w, x, y, z])


class RefinementSuggestions:
    """ 相机精化时的建议值，启用的建议项以软约束形式加入代价函数 """

    def __init__(self):
        self.suggest_skewness_value_enabled = False
        self.suggested_skewness_value = 0.0
        self.suggest_horizontal_focal_length_enabled = False
        self.suggested_horizontal_focal_length_value = 0.0
        self.suggest_vertical_focal_length_enabled = False
        self.suggested_vertical_focal_length_value = 0.0
        self.suggest_aspect_ratio_enabled = False
        self.suggested_aspect_ratio_value = 1.0
        self.suggest_principal_point_enabled = False
        self.suggested_principal_point_value = None   # (cx, cy)
        self.suggest_rotation_enabled = False
        self.suggested_rotation_value = None          # 单位四元数 (a, b, c, d)
        self.suggest_center_enabled = False
        self.suggested_center_value = None            # (x, y, z)

    def hasIntrinsicSuggestions(self):
        return self.suggest_skewness_value_enabled or \
            self.suggest_horizontal_focal_length_enabled or \
            self.suggest_vertical_focal_length_enabled or \
            self.suggest_aspect_ratio_enabled or \
            self.suggest_principal_point_enabled

    def hasExtrinsicSuggestions(self):
        return self.suggest_rotation_enabled or self.suggest_center_enabled

    def hasSuggestions(self):
        return self.hasIntrinsicSuggestions() or self.hasExtrinsicSuggestions()


class PinholeCameraRefiner(ModelRefiner):
    """ 针孔相机精化：重投影误差加上建议值的软约束

    建议项的权重从 min_suggestion_weight 开始，每轮增加 suggestion_weight_step，
    只要上一轮降低了代价就继续，直到达到 max_suggestion_weight
    """

    DEFAULT_MIN_SUGGESTION_WEIGHT = 0.1
    DEFAULT_MAX_SUGGESTION_WEIGHT = 2.0
    DEFAULT_SUGGESTION_WEIGHT_STEP = 0.475

    def __init__(self,
                 estimator,
                 suggestions,
                 fast_refinement=False,
                 keep_covariance=False,
                 min_suggestion_weight=DEFAULT_MIN_SUGGESTION_WEIGHT,
                 max_suggestion_weight=DEFAULT_MAX_SUGGESTION_WEIGHT,
                 suggestion_weight_step=DEFAULT_SUGGESTION_WEIGHT_STEP):
        super().__init__(estimator,
                         fast_refinement=fast_refinement,
                         keep_covariance=keep_covariance)
        self.suggestions = suggestions
        self.min_suggestion_weight = min_suggestion_weight
        self.max_suggestion_weight = max_suggestion_weight
        self.suggestion_weight_step = suggestion_weight_step
        self.current_weight = min_suggestion_weight

    def suggestionResiduals(self, parameters, weight):
        """ 建议项的残差，平方和等于 weight * sum((参数 - 建议值)^2)

        参数
        ----------
        parameters : numpy
            相机参数向量，内参已知时不包含内参部分
        weight : float
            建议项的权重

        返回
        ----------
        numpy
            建议项残差向量
        """
        suggestions = self.suggestions
        terms = []
        offset = 0
        if self.estimator.intrinsic is None:
            fx, fy, skew, cx, cy = parameters[:5]
            offset = 5
            if suggestions.suggest_skewness_value_enabled:
                terms.append(skew - suggestions.suggested_skewness_value)
            if suggestions.suggest_horizontal_focal_length_enabled:
                terms.append(fx - suggestions.suggested_horizontal_focal_length_value)
            if suggestions.suggest_vertical_focal_length_enabled:
                terms.append(fy - suggestions.suggested_vertical_focal_length_value)
            if suggestions.suggest_aspect_ratio_enabled:
                terms.append(fy / fx - suggestions.suggested_aspect_ratio_value)
            if suggestions.suggest_principal_point_enabled:
                terms.extend(np.array([cx, cy]) - suggestions.suggested_principal_point_value)

        if suggestions.suggest_rotation_enabled:
            quaternion = rotationToQuaternion(parameters[offset:offset + 3])
            suggested = suggestions.suggested_rotation_value
            # q 与 -q 表示同一个旋转
            if np.dot(quaternion, suggested) < 0.0:
                quaternion = -quaternion
            terms.extend(quaternion - suggested)
        if suggestions.suggest_center_enabled:
            terms.extend(parameters[offset + 3:offset + 6] - suggestions.suggested_center_value)

        return np.sqrt(weight) * np.asarray(terms, dtype=float)

    def weightedResidualFunction(self, inputs, outputs, weight):
        projection_residuals = super().residualFunction(inputs, outputs)

        def residuals(parameters):
            return np.r_[projection_residuals(parameters),
                         self.suggestionResiduals(parameters, weight)]
        return residuals

    def refine(self, model, inputs, outputs, standard_deviation):
        """ 精化相机，存在建议值时逐步增大建议项权重 """
        if not self.suggestions.hasSuggestions():
            return super().refine(model, inputs, outputs, standard_deviation)

        self.covariance = None
        try:
            parameters = self.estimator.modelToParameters(model)
        except np.linalg.LinAlgError as e:
            raise RefinerException(f'相机无法分解: {e}') from e

        refined = model
        jacobian = None
        initial_parameters = parameters
        first_residuals = None
        self.current_weight = self.min_suggestion_weight
        while True:
            residuals = self.weightedResidualFunction(inputs, outputs, self.current_weight)
            if first_residuals is None:
                first_residuals = residuals
            initial_cost = 0.5 * np.sum(residuals(parameters) ** 2)
            result = self.optimize(residuals, parameters)
            improved = result.cost < initial_cost
            if improved:
                parameters = result.x
                refined = self.estimator.parametersToModel(parameters)
                jacobian = result.jac
            logger.debug('建议项权重 %g: 代价 %g -> %g', self.current_weight, initial_cost, result.cost)

            if self.fast_refinement or not improved or \
                    self.current_weight >= self.max_suggestion_weight:
                break
            # 最后一轮使用 max_suggestion_weight
            next_weight = self.current_weight + self.suggestion_weight_step
            if next_weight > self.max_suggestion_weight or \
                    np.isclose(next_weight, self.max_suggestion_weight):
                next_weight = self.max_suggestion_weight
            self.current_weight = next_weight

        if self.keep_covariance:
            if jacobian is None:
                jacobian = self.numericalJacobian(first_residuals, initial_parameters)
            self.covariance = computeCovariance(jacobian, standard_deviation)
        return refined

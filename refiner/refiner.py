import logging

import numpy as np
from scipy.optimize import least_squares

from utils.exceptions import RefinerException

logger = logging.getLogger(__name__)


def computeCovariance(jacobian, standard_deviation):
    """ 由雅可比矩阵估计参数协方差 sigma^2 (J^T J)^-1

    参数
    ----------
    jacobian : numpy
        收敛处的雅可比矩阵 (m, n)
    standard_deviation : float
        残差的标准差

    返回
    ----------
    numpy or None
        (n, n) 协方差矩阵，J^T J 奇异时为 None
    """
    JtJ = jacobian.T @ jacobian
    if not np.all(np.isfinite(JtJ)) or \
            np.linalg.matrix_rank(JtJ) < np.shape(JtJ)[0]:
        return None
    try:
        return standard_deviation ** 2 * np.linalg.inv(JtJ)
    except np.linalg.LinAlgError:
        return None


class ModelRefiner:
    """ 使用 Levenberg-Marquardt 算法在内点集上精化模型 """

    FAST_TOLERANCE = 1e-4
    FAST_MAX_EVALUATIONS = 100

    def __init__(self, estimator, fast_refinement=False, keep_covariance=False):
        self.estimator = estimator
        self.fast_refinement = fast_refinement    # 是否使用宽松的收敛条件
        self.keep_covariance = keep_covariance    # 是否估计协方差
        self.covariance = None

    def residualFunction(self, inputs, outputs):
        """ 返回参数向量到残差向量的函数，子类在此加入额外的残差项 """
        def residuals(parameters):
            model = self.estimator.parametersToModel(parameters)
            return self.estimator.signedResiduals(inputs, outputs, model)
        return residuals

    def optimize(self, residuals, initial_parameters):
        """ 运行一次最小二乘优化

        返回
        ----------
        OptimizeResult
            scipy 的优化结果

        异常
        ----------
        RefinerException
            优化失败或残差数值无效
        """
        initial_residuals = residuals(initial_parameters)
        if not np.all(np.isfinite(initial_residuals)):
            raise RefinerException('初始模型的残差无效')
        # 'lm' 方法要求残差数目不少于参数数目
        method = 'lm' if len(initial_residuals) >= len(initial_parameters) else 'trf'
        options = {}
        if self.fast_refinement:
            options = dict(ftol=self.FAST_TOLERANCE,
                           xtol=self.FAST_TOLERANCE,
                           max_nfev=self.FAST_MAX_EVALUATIONS)
        try:
            result = least_squares(residuals, initial_parameters, method=method, **options)
        except (ValueError, np.linalg.LinAlgError) as e:
            raise RefinerException(f'最小二乘优化失败: {e}') from e
        if result.status < 0 or not np.all(np.isfinite(result.x)):
            raise RefinerException(f'最小二乘优化失败: {result.message}')
        return result

    def refine(self, model, inputs, outputs, standard_deviation):
        """ 在内点集上精化模型

        参数
        ----------
        model : Model
            鲁棒估计得到的模型
        inputs : numpy
            内点的输入序列
        outputs : numpy
            内点的输出序列，单序列问题为 None
        standard_deviation : float
            精化所用的残差标准差，用于估计协方差

        返回
        ----------
        Model
            精化后的模型，没有改进时返回原模型

        异常
        ----------
        RefinerException
            精化失败
        """
        self.covariance = None
        try:
            initial_parameters = self.estimator.modelToParameters(model)
        except np.linalg.LinAlgError as e:
            raise RefinerException(f'模型无法参数化: {e}') from e

        residuals = self.residualFunction(inputs, outputs)
        result = self.optimize(residuals, initial_parameters)
        initial_cost = 0.5 * np.sum(residuals(initial_parameters) ** 2)

        if result.cost <= initial_cost:
            refined = self.estimator.parametersToModel(result.x)
            jacobian = result.jac
        else:
            logger.debug('精化没有降低代价 (%g > %g)，保留原模型', result.cost, initial_cost)
            refined = model
            jacobian = self.numericalJacobian(residuals, initial_parameters)

        if self.keep_covariance:
            self.covariance = computeCovariance(jacobian, standard_deviation)
        return refined

    def numericalJacobian(self, residuals, parameters):
        """ 在给定参数处的前向差分雅可比矩阵 """
        base = residuals(parameters)
        jacobian = np.zeros((len(base), len(parameters)))
        for i in range(len(parameters)):
            step = np.sqrt(np.finfo(float).eps) * max(1.0, abs(parameters[i]))
            shifted = np.array(parameters, dtype=float)
            shifted[i] += step
            jacobian[:, i] = (residuals(shifted) - base) / step
        return jacobian

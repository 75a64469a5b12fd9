import logging

import numpy as np

from .methods import RobustEstimatorMethod
from .pinhole_camera_robust_estimator import PinholeCameraRobustEstimator
from .robust_estimator import RobustEstimator
from estimator import (EstimatorAffine2D, EstimatorHomography, EstimatorPoint2D,
                       EstimatorPoint3D, EstimatorProjective3D)

logger = logging.getLogger(__name__)


def __transformInliersToMask(inliers_data, point_number):
    """ 转换内点信息为 0 1 组成的 mask """
    if inliers_data is None or inliers_data.inliers is None:
        return np.zeros(point_number, dtype=np.uint8)
    return inliers_data.inliers.astype(np.uint8)


def __run(robust_estimator, threshold, conf, max_iters, refine):
    method = robust_estimator.getMethod()
    if method in (RobustEstimatorMethod.LMEDS, RobustEstimatorMethod.PROMEDS):
        robust_estimator.setStopThreshold(threshold)
    else:
        robust_estimator.setThreshold(threshold)
    robust_estimator.setConfidence(conf)
    robust_estimator.setMaxIterations(max_iters)
    robust_estimator.setResultRefined(refine)
    robust_estimator.setComputeAndKeepInliersEnabled(True)

    model = robust_estimator.estimate()
    logger.info('Number of iterations = %d', robust_estimator.statistics.iteration_number)
    mask = __transformInliersToMask(robust_estimator.getInliersData(),
                                    robust_estimator.correspondences.point_number)
    return model, mask


def estimatePoint2D(lines, method=RobustEstimatorMethod.RANSAC, quality_scores=None,
                    threshold=1e-3, conf=0.99, max_iters=5000, refine=True):
    """ 由直线集合 (a, b, c) 鲁棒估计二维交点

    返回
    --------
    Point2D, numpy
        交点模型，标注内点和外点的 mask
    """
    robust_estimator = RobustEstimator(EstimatorPoint2D(), inputs=lines,
                                       quality_scores=quality_scores, method=method)
    return __run(robust_estimator, threshold, conf, max_iters, refine)


def estimatePoint3D(planes, method=RobustEstimatorMethod.RANSAC, quality_scores=None,
                    threshold=1e-3, conf=0.99, max_iters=5000, refine=True):
    """ 由平面集合 (a, b, c, d) 鲁棒估计三维交点 """
    robust_estimator = RobustEstimator(EstimatorPoint3D(), inputs=planes,
                                       quality_scores=quality_scores, method=method)
    return __run(robust_estimator, threshold, conf, max_iters, refine)


def findHomography(src_points, dst_points, method=RobustEstimatorMethod.RANSAC,
                   quality_scores=None, threshold=1.0, conf=0.99, max_iters=5000, refine=True):
    """ 单应矩阵求解

    参数
    --------
    src_points : numpy
        源图像特征点集合 (N, 2)
    dst_points : numpy
        目标图像特征点集合 (N, 2)
    method : RobustEstimatorMethod
        鲁棒估计方法
    quality_scores : numpy
        特征点匹配质量，PROSAC 和 PROMedS 必需
    threshold : float
        决定内点和外点的阈值，中值类方法为终止阈值
    conf : float
        置信参数
    max_iters : int
        最大迭代次数
    refine : bool
        是否在内点上精化结果

    返回
    --------
    numpy, numpy
        单应矩阵，标注内点和外点的 mask
    """
    robust_estimator = RobustEstimator(EstimatorHomography(), inputs=src_points,
                                       outputs=dst_points, quality_scores=quality_scores,
                                       method=method)
    model, mask = __run(robust_estimator, threshold, conf, max_iters, refine)
    H = model.descriptor / model.descriptor[2, 2]
    return H, mask


def findAffineTransform(src_points, dst_points, method=RobustEstimatorMethod.RANSAC,
                        quality_scores=None, threshold=1.0, conf=0.99, max_iters=5000, refine=True):
    """ 二维仿射变换求解，返回 2x3 矩阵和内点 mask """
    robust_estimator = RobustEstimator(EstimatorAffine2D(), inputs=src_points,
                                       outputs=dst_points, quality_scores=quality_scores,
                                       method=method)
    model, mask = __run(robust_estimator, threshold, conf, max_iters, refine)
    return model.descriptor, mask


def findProjectiveTransform3D(src_points, dst_points, method=RobustEstimatorMethod.RANSAC,
                              quality_scores=None, threshold=1.0, conf=0.99, max_iters=5000,
                              refine=True):
    """ 三维射影变换求解，返回 4x4 矩阵和内点 mask """
    robust_estimator = RobustEstimator(EstimatorProjective3D(), inputs=src_points,
                                       outputs=dst_points, quality_scores=quality_scores,
                                       method=method)
    model, mask = __run(robust_estimator, threshold, conf, max_iters, refine)
    return model.descriptor / model.descriptor[3, 3], mask


def estimatePinholeCamera(points3d, points2d, method=RobustEstimatorMethod.PROMEDS,
                          quality_scores=None, intrinsic=None, threshold=1.0, conf=0.99,
                          max_iters=5000, refine=True):
    """ 由 3D-2D 点对鲁棒估计针孔相机，返回 PinholeCamera 和内点 mask """
    robust_estimator = PinholeCameraRobustEstimator(points3d, points2d,
                                                    quality_scores=quality_scores,
                                                    method=method,
                                                    intrinsic=intrinsic)
    return __run(robust_estimator, threshold, conf, max_iters, refine)

import math as m

import numpy as np


def normalizePoints(points):
    """ Hartley 规范化：平移到质心并缩放，使点到质心的平均距离为 sqrt(d)

    参数
    ----------
    points : numpy
        (n, d) 非齐次坐标点集

    返回
    ----------
    numpy, numpy
        规范化后的点集，(d+1, d+1) 规范化变换矩阵
    """
    points = np.asarray(points, dtype=float)
    dimension = np.shape(points)[1]

    # 计算质点坐标 均值
    mass_point = np.mean(points, axis=0)
    # 求解点离质点的平均距离
    average_distance = np.mean(np.sqrt(np.sum((points - mass_point) ** 2, axis=1)))
    if average_distance < np.finfo(float).eps:
        ratio = 1.0
    else:
        ratio = m.sqrt(dimension) / average_distance

    normalized_points = (points - mass_point) * ratio
    transform = np.eye(dimension + 1)
    transform[:dimension, :dimension] *= ratio
    transform[:dimension, dimension] = -ratio * mass_point
    return normalized_points, transform

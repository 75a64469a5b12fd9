"""pytest 运行期配置与合成数据。

测试数据全部由随机数生成，每个测试使用固定的种子。采样器使用标准库 random 模块，
因此需要同时固定 random 和 numpy 的种子。
"""

import random

import numpy as np
import pytest
from scipy.spatial.transform import Rotation

from model import PinholeCamera, PinholeCameraIntrinsicParameters


@pytest.fixture
def rng():
    random.seed(1234)
    return np.random.default_rng(1234)


def make_lines(rng, point, number, outlier_ratio=0.0, outlier_offset=50.0):
    """ 生成经过 point 的直线集合 (a, b, c)，部分直线平移为外点

    返回
    ----------
    numpy, numpy
        直线 (N, 3)，外点 mask
    """
    angles = rng.uniform(0.0, np.pi, number)
    a, b = np.cos(angles), np.sin(angles)
    c = -(a * point[0] + b * point[1])
    outliers = rng.uniform(size=number) < outlier_ratio
    c[outliers] += rng.uniform(outlier_offset / 2, outlier_offset, np.count_nonzero(outliers)) * \
        rng.choice([-1.0, 1.0], np.count_nonzero(outliers))
    return np.c_[a, b, c], outliers


def make_planes(rng, point, number, outlier_ratio=0.0, outlier_offset=50.0):
    """ 生成经过 point 的平面集合 (a, b, c, d) """
    normals = rng.normal(size=(number, 3))
    normals /= np.linalg.norm(normals, axis=1)[:, None]
    d = -normals @ point
    outliers = rng.uniform(size=number) < outlier_ratio
    d[outliers] += rng.uniform(outlier_offset / 2, outlier_offset, np.count_nonzero(outliers))
    return np.c_[normals, d], outliers


def perturb(rng, points, outlier_ratio, error_std):
    """ 对部分点加入大误差作为外点，返回 (扰动后的点, 外点 mask, 误差大小) """
    number = np.shape(points)[0]
    outliers = rng.uniform(size=number) < outlier_ratio
    errors = np.zeros_like(points)
    errors[outliers] = rng.normal(0.0, error_std, (np.count_nonzero(outliers), np.shape(points)[1]))
    return points + errors, outliers, np.linalg.norm(errors, axis=1)


def make_quality_scores(rng, error_norms, outliers):
    """ 内点质量约为 1，外点质量随误差增大而减小 """
    number = len(error_norms)
    scores = 1.0 + rng.uniform(-0.3, 0.3, number)
    scores[outliers] = 1.0 / (1.0 + error_norms[outliers]) + rng.uniform(-0.3, 0.3, np.count_nonzero(outliers))
    return scores


def make_camera(rng):
    """ 生成随机的针孔相机，返回 (相机, 内参, 旋转矩阵, 中心) """
    intrinsic = PinholeCameraIntrinsicParameters(
        horizontal_focal_length=rng.uniform(110.0, 130.0),
        vertical_focal_length=rng.uniform(110.0, 130.0),
        horizontal_principal_point=rng.uniform(90.0, 100.0),
        vertical_principal_point=rng.uniform(90.0, 100.0),
        skewness=rng.uniform(-0.001, 0.001))
    angles = rng.uniform(10.0, 15.0, 3)
    rotation = Rotation.from_euler('xyz', angles, degrees=True).as_matrix()
    center = rng.uniform(-50.0, 50.0, 3)
    camera = PinholeCamera.compose(intrinsic, rotation, center)
    return camera, intrinsic, rotation, center


def make_scene_points(rng, rotation, center, number):
    """ 生成位于相机前方的世界坐标点 """
    camera_points = np.c_[rng.uniform(-50.0, 50.0, (number, 2)),
                          rng.uniform(100.0, 200.0, number)]
    return camera_points @ rotation + center


def make_homography_points(rng, number):
    H = np.array([[1.1, 0.05, 5.0],
                  [0.02, 0.95, -3.0],
                  [1e-4, 2e-4, 1.0]])
    src = rng.uniform(0.0, 100.0, (number, 2))
    projected = src @ H[:, :2].T + H[:, 2]
    dst = projected[:, :2] / projected[:, 2:]
    return H, src, dst

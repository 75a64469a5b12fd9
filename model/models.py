import cv2
import numpy as np
from scipy import linalg


class Model:
    """ 鲁棒估计求解模型基类 """

    def __init__(self):
        self.descriptor = None


class Point2D(Model):
    """ 二维点模型，descriptor 为非齐次坐标 (x, y) """

    def __init__(self, coordinates=(0.0, 0.0)):
        super().__init__()
        self.descriptor = np.asarray(coordinates, dtype=float)


class Point3D(Model):
    """ 三维点模型，descriptor 为非齐次坐标 (x, y, z) """

    def __init__(self, coordinates=(0.0, 0.0, 0.0)):
        super().__init__()
        self.descriptor = np.asarray(coordinates, dtype=float)


class Homography(Model):
    """ 二维射影变换（单应矩阵）模型 """

    def __init__(self, matrix=None):
        super().__init__()
        self.descriptor = np.eye(3) if matrix is None else np.asarray(matrix, dtype=float)

    def transform(self, points):
        """ 变换 (n, 2) 点集，返回 (n, 2) 非齐次坐标 """
        points = np.asarray(points, dtype=float)
        projected = points @ self.descriptor[:, :2].T + self.descriptor[:, 2]
        with np.errstate(divide='ignore', invalid='ignore'):
            result = projected[:, :2] / projected[:, 2:]
        result[~np.isfinite(result)] = np.inf
        return result


ProjectiveTransformation2D = Homography


class AffineTransformation2D(Model):
    """ 二维仿射变换模型，descriptor 为 2x3 矩阵 [A | t] """

    def __init__(self, matrix=None):
        super().__init__()
        self.descriptor = np.c_[np.eye(2), np.zeros(2)] if matrix is None \
            else np.asarray(matrix, dtype=float)

    def transform(self, points):
        points = np.asarray(points, dtype=float)
        return points @ self.descriptor[:, :2].T + self.descriptor[:, 2]


class ProjectiveTransformation3D(Model):
    """ 三维射影变换模型，descriptor 为 4x4 矩阵 """

    def __init__(self, matrix=None):
        super().__init__()
        self.descriptor = np.eye(4) if matrix is None else np.asarray(matrix, dtype=float)

    def transform(self, points):
        points = np.asarray(points, dtype=float)
        projected = points @ self.descriptor[:, :3].T + self.descriptor[:, 3]
        with np.errstate(divide='ignore', invalid='ignore'):
            result = projected[:, :3] / projected[:, 3:]
        result[~np.isfinite(result)] = np.inf
        return result


class PinholeCameraIntrinsicParameters:
    """ 针孔相机内参 """

    def __init__(self,
                 horizontal_focal_length=1.0,
                 vertical_focal_length=1.0,
                 horizontal_principal_point=0.0,
                 vertical_principal_point=0.0,
                 skewness=0.0):
        self.horizontal_focal_length = horizontal_focal_length
        self.vertical_focal_length = vertical_focal_length
        self.horizontal_principal_point = horizontal_principal_point
        self.vertical_principal_point = vertical_principal_point
        self.skewness = skewness

    @property
    def aspect_ratio(self):
        """ 纵横比 fy / fx """
        return self.vertical_focal_length / self.horizontal_focal_length

    @property
    def principal_point(self):
        return np.array([self.horizontal_principal_point, self.vertical_principal_point])

    def internalMatrix(self):
        return np.array([[self.horizontal_focal_length, self.skewness, self.horizontal_principal_point],
                         [0.0, self.vertical_focal_length, self.vertical_principal_point],
                         [0.0, 0.0, 1.0]])

    @classmethod
    def fromInternalMatrix(cls, K):
        K = np.asarray(K, dtype=float) / K[2, 2]
        return cls(horizontal_focal_length=K[0, 0],
                   vertical_focal_length=K[1, 1],
                   horizontal_principal_point=K[0, 2],
                   vertical_principal_point=K[1, 2],
                   skewness=K[0, 1])

    def __repr__(self):
        return f'PinholeCameraIntrinsicParameters(fx={self.horizontal_focal_length}, ' \
               f'fy={self.vertical_focal_length}, cx={self.horizontal_principal_point}, ' \
               f'cy={self.vertical_principal_point}, skew={self.skewness})'


class PinholeCamera(Model):
    """ 针孔相机模型，descriptor 为 3x4 投影矩阵 P = K R [I | -C] """

    def __init__(self, matrix=None):
        super().__init__()
        self.descriptor = np.c_[np.eye(3), np.zeros(3)] if matrix is None \
            else np.asarray(matrix, dtype=float)

    @classmethod
    def compose(cls, intrinsic, rotation, center):
        """ 由内参、旋转矩阵（或旋转向量）和相机中心构建相机

        参数
        ----------
        intrinsic : PinholeCameraIntrinsicParameters
            相机内参
        rotation : numpy
            3x3 旋转矩阵或长度为 3 的旋转向量
        center : numpy
            世界坐标系中的相机中心
        """
        rotation = np.asarray(rotation, dtype=float)
        if rotation.shape != (3, 3):
            rotation, _ = cv2.Rodrigues(rotation.reshape(3, 1))
        center = np.asarray(center, dtype=float).ravel()
        matrix = intrinsic.internalMatrix() @ rotation @ np.c_[np.eye(3), -center]
        return cls(matrix)

    def project(self, points):
        """ 投影 (n, 3) 世界坐标点，返回 (n, 2) 图像坐标 """
        points = np.asarray(points, dtype=float)
        projected = points @ self.descriptor[:, :3].T + self.descriptor[:, 3]
        with np.errstate(divide='ignore', invalid='ignore'):
            result = projected[:, :2] / projected[:, 2:]
        result[~np.isfinite(result)] = np.inf
        return result

    def normalize(self):
        """ 将投影矩阵缩放为 Frobenius 范数为 1 """
        norm = np.linalg.norm(self.descriptor)
        if norm > 0.0:
            self.descriptor = self.descriptor / norm

    def decompose(self):
        """ 分解投影矩阵为内参、旋转和相机中心

        返回
        ----------
        PinholeCameraIntrinsicParameters, numpy, numpy
            相机内参，3x3 旋转矩阵，相机中心

        异常
        ----------
        numpy.linalg.LinAlgError
            投影矩阵左侧 3x3 子矩阵奇异
        """
        left = self.descriptor[:, :3]
        if abs(np.linalg.det(left)) < np.finfo(float).tiny:
            raise np.linalg.LinAlgError('投影矩阵左侧子矩阵奇异，无法分解')
        center = -np.linalg.solve(left, self.descriptor[:, 3])

        K, R = linalg.rq(left)
        # RQ 分解的符号不唯一，调整使内参矩阵对角线为正
        signs = np.diag(np.sign(np.diag(K)))
        K = K @ signs
        R = signs @ R
        # 投影矩阵整体乘以 -1 表示同一个相机
        if np.linalg.det(R) < 0.0:
            R = -R
        return PinholeCameraIntrinsicParameters.fromInternalMatrix(K), R, center

    def intrinsicParameters(self):
        return self.decompose()[0]

    def rotation(self):
        return self.decompose()[1]

    def center(self):
        return self.decompose()[2]

import cv2
import numpy as np

from model import PinholeCamera, PinholeCameraIntrinsicParameters
from .estimator import Estimator
from solver.solver_pinhole_camera_dlt import SolverPinholeCameraDLT
from solver.solver_pinhole_camera_epnp import SolverPinholeCameraEPnP
from utils.normalization import normalizePoints


class EstimatorPinholeCamera(Estimator):
    """ 由 3D-2D 点对估计针孔相机

    未知内参时使用 DLT 求解完整投影矩阵，已知内参时使用 EPnP 只求解相机姿态
    """

    # 完整参数: fx, fy, skew, cx, cy, 旋转向量(3), 相机中心(3)
    INTRINSIC_PARAMETERS = 5

    def __init__(self, intrinsic=None):
        super().__init__()
        self.intrinsic = None
        self.minimal_solver = None
        self.setIntrinsic(intrinsic)

    def setIntrinsic(self, intrinsic):
        """ 设置已知的相机内参，None 表示内参未知 """
        self.intrinsic = intrinsic
        if intrinsic is None:
            self.minimal_solver = SolverPinholeCameraDLT()
        else:
            self.minimal_solver = SolverPinholeCameraEPnP(intrinsic)

    def sampleSize(self):
        return self.minimal_solver.sampleSize()

    def estimateModel(self, inputs, outputs, sample):
        if self.intrinsic is not None or not self.normalize_points:
            return self.minimal_solver.estimateModel(inputs, outputs, sample)

        normalized_3d, transform_3d = normalizePoints(inputs[sample])
        normalized_2d, transform_2d = normalizePoints(outputs[sample])
        models = self.minimal_solver.estimateModel(normalized_3d, normalized_2d, None)
        for model in models:
            # P = T2^-1 P' T3
            model.descriptor = np.linalg.inv(transform_2d) @ model.descriptor @ transform_3d
            model.normalize()
        return models

    def residualVectors(self, inputs, outputs, model):
        """ 重投影误差 """
        return model.project(inputs) - outputs

    def modelToParameters(self, model):
        """ 分解相机得到精化参数，已知内参时只包含旋转向量和相机中心 """
        intrinsic, rotation, center = model.decompose()
        rotation_vector, _ = cv2.Rodrigues(rotation)
        extrinsic = np.r_[rotation_vector.ravel(), center]
        if self.intrinsic is not None:
            return extrinsic
        return np.r_[intrinsic.horizontal_focal_length,
                     intrinsic.vertical_focal_length,
                     intrinsic.skewness,
                     intrinsic.horizontal_principal_point,
                     intrinsic.vertical_principal_point,
                     extrinsic]

    def parametersToModel(self, parameters):
        parameters = np.asarray(parameters, dtype=float)
        if self.intrinsic is not None:
            intrinsic = self.intrinsic
            extrinsic = parameters
        else:
            fx, fy, skew, cx, cy = parameters[:self.INTRINSIC_PARAMETERS]
            intrinsic = PinholeCameraIntrinsicParameters(horizontal_focal_length=fx,
                                                         vertical_focal_length=fy,
                                                         horizontal_principal_point=cx,
                                                         vertical_principal_point=cy,
                                                         skewness=skew)
            extrinsic = parameters[self.INTRINSIC_PARAMETERS:]
        return PinholeCamera.compose(intrinsic, extrinsic[:3], extrinsic[3:6])

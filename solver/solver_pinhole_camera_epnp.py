import logging

import cv2
import numpy as np

from model import PinholeCamera
from solver.solver_engine import SolverEngine

logger = logging.getLogger(__name__)


class SolverPinholeCameraEPnP(SolverEngine):
    """ 已知相机内参时使用 OpenCV 的 EPnP 求解相机姿态 """

    def __init__(self, intrinsic):
        super().__init__()
        self.intrinsic = intrinsic  # PinholeCameraIntrinsicParameters

    def sampleSize(self):
        return 6

    def estimateModel(self, inputs, outputs, sample):
        if sample is None:
            sample = [i for i in range(np.shape(inputs)[0])]
        object_points = np.ascontiguousarray(inputs[sample], dtype=np.float64).reshape(-1, 1, 3)
        image_points = np.ascontiguousarray(outputs[sample], dtype=np.float64).reshape(-1, 1, 2)
        if not np.all(np.isfinite(object_points)) or not np.all(np.isfinite(image_points)):
            return []
        K = self.intrinsic.internalMatrix()

        try:
            success, rvec, tvec = cv2.solvePnP(object_points, image_points, K, None,
                                               flags=cv2.SOLVEPNP_EPNP)
        except cv2.error as e:
            logger.debug('EPnP 求解失败: %s', e)
            return []
        if not success or not np.all(np.isfinite(rvec)) or not np.all(np.isfinite(tvec)):
            return []

        rotation, _ = cv2.Rodrigues(rvec)
        center = -rotation.T @ tvec.ravel()
        return [PinholeCamera.compose(self.intrinsic, rotation, center)]

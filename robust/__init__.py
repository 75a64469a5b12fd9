from utils.exceptions import (EstimatorException, LockedException, NotReadyException,
                              RefinerException, RobustEstimatorException)
from .correspondences import CorrespondenceStore
from .inliers import InliersData
from .iteration import IterationController, IterationState, computeRequiredIterations
from .listener import RobustEstimatorListener
from .methods import RobustEstimatorMethod, createMethodStrategy
from .robust_estimator import RobustEstimator
from .pinhole_camera_robust_estimator import PinholeCameraRobustEstimator
from .robust_api import (estimatePinholeCamera, estimatePoint2D, estimatePoint3D,
                         findAffineTransform, findHomography, findProjectiveTransform3D)

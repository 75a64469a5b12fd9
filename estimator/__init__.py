from .estimator import Estimator
from .estimator_point import EstimatorPoint2D, EstimatorPoint3D
from .estimator_homography import EstimatorHomography
from .estimator_affine2d import EstimatorAffine2D
from .estimator_projective3d import EstimatorProjective3D
from .estimator_pinhole_camera import EstimatorPinholeCamera

from .solver_engine import SolverEngine
from .solver_point_intersection import SolverPointThreePlanes, SolverPointTwoLines
from .solver_homography_four_point import SolverHomographyFourPoint
from .solver_affine_three_point import SolverAffineThreePoint
from .solver_projective3d_five_point import SolverProjective3DFivePoint
from .solver_pinhole_camera_dlt import SolverPinholeCameraDLT
from .solver_pinhole_camera_epnp import SolverPinholeCameraEPnP

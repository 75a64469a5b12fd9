from .refiner import ModelRefiner, computeCovariance
from .pinhole_camera_refiner import (PinholeCameraRefiner, RefinementSuggestions,
                                     rotationToQuaternion)

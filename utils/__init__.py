from .exceptions import (EstimatorException, LockedException, NotReadyException,
                         RefinerException, RobustEstimatorException)
from .normalization import normalizePoints
from .score import (LMedSScoringFunction, MSACScoringFunction, ProsacScoringFunction,
                    RansacScoringFunction, Score)
from .uniform_random_generator import UniformRandomGenerator

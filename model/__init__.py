from .models import (AffineTransformation2D, Homography, Model, PinholeCamera,
                     PinholeCameraIntrinsicParameters, Point2D, Point3D,
                     ProjectiveTransformation2D, ProjectiveTransformation3D)

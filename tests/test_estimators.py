import numpy as np
import pytest

from conftest import make_homography_points
from estimator import (EstimatorAffine2D, EstimatorHomography, EstimatorPoint2D,
                       EstimatorPoint3D, EstimatorProjective3D)
from model import AffineTransformation2D, Homography, ProjectiveTransformation3D
from solver import (SolverAffineThreePoint, SolverHomographyFourPoint, SolverPinholeCameraDLT,
                    SolverPointThreePlanes, SolverPointTwoLines, SolverProjective3DFivePoint)
from utils import normalizePoints


def test_point2d_from_two_lines():
    estimator = EstimatorPoint2D()
    lines = np.array([[1.0, 0.0, -2.0], [0.0, 1.0, 3.0], [1.0, 1.0, 1.0]])
    models = estimator.estimateModel(lines, None, [0, 1])
    assert len(models) == 1
    np.testing.assert_allclose(models[0].descriptor, [2.0, -3.0])
    residuals = estimator.residuals(lines, None, models[0])
    np.testing.assert_allclose(residuals, [0.0, 0.0, 0.0], atol=1e-12)


def test_point2d_parallel_lines_are_degenerate():
    estimator = EstimatorPoint2D()
    lines = np.array([[1.0, 2.0, 3.0], [2.0, 4.0, -1.0]])
    assert estimator.estimateModel(lines, None, [0, 1]) == []


def test_point2d_residual_is_distance():
    estimator = EstimatorPoint2D()
    lines = np.array([[3.0, 4.0, 0.0]])
    from model import Point2D
    residuals = estimator.residuals(lines, None, Point2D([3.0, 4.0]))
    assert residuals[0] == pytest.approx(5.0)


def test_point3d_from_three_planes():
    estimator = EstimatorPoint3D()
    planes = np.array([[1.0, 0.0, 0.0, -1.0],
                       [0.0, 1.0, 0.0, -2.0],
                       [0.0, 0.0, 2.0, -6.0]])
    models = estimator.estimateModel(planes, None, [0, 1, 2])
    np.testing.assert_allclose(models[0].descriptor, [1.0, 2.0, 3.0])


def test_point3d_planes_sharing_a_line_are_degenerate():
    estimator = EstimatorPoint3D()
    planes = np.array([[1.0, 0.0, 0.0, 0.0],
                       [0.0, 1.0, 0.0, 0.0],
                       [1.0, 1.0, 0.0, 0.0]])
    assert estimator.estimateModel(planes, None, [0, 1, 2]) == []


@pytest.mark.parametrize('normalize', [True, False])
def test_homography_four_points(normalize, rng):
    H, src, dst = make_homography_points(rng, 4)
    estimator = EstimatorHomography()
    estimator.setNormalizePoints(normalize)
    models = estimator.estimateModel(src, dst, [0, 1, 2, 3])
    assert len(models) == 1
    np.testing.assert_allclose(models[0].descriptor / models[0].descriptor[2, 2], H, rtol=1e-8, atol=1e-10)


def test_homography_collinear_sample_is_degenerate():
    estimator = EstimatorHomography()
    src = np.array([[0.0, 0.0], [1.0, 1.0], [2.0, 2.0], [3.0, 3.0]])
    dst = src * 2.0
    assert estimator.estimateModel(src, dst, [0, 1, 2, 3]) == []


def test_homography_orientation_check_rejects_reflection():
    estimator = EstimatorHomography()
    src = np.array([[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 1.0]])
    assert estimator.isValidSample(src, src * 2.0, [0, 1, 2, 3])
    reflected = src * np.array([-1.0, 1.0])
    # 交换两个点破坏了朝向一致性
    swapped = reflected[[0, 1, 3, 2]]
    assert not estimator.isValidSample(src, swapped, [0, 1, 2, 3])


def test_homography_parameters_round_trip():
    estimator = EstimatorHomography()
    H = np.array([[2.0, 0.1, 3.0], [0.2, 1.8, -1.0], [1e-3, 2e-3, 2.0]])
    parameters = estimator.modelToParameters(Homography(H))
    assert parameters.shape == (8,)
    np.testing.assert_allclose(estimator.parametersToModel(parameters).descriptor, H / 2.0)


def test_affine_three_points(rng):
    A = np.array([[1.2, -0.3, 4.0], [0.5, 0.9, -2.0]])
    src = rng.uniform(-10.0, 10.0, (3, 2))
    dst = AffineTransformation2D(A).transform(src)
    models = EstimatorAffine2D().estimateModel(src, dst, [0, 1, 2])
    np.testing.assert_allclose(models[0].descriptor, A, atol=1e-10)


def test_affine_collinear_sample_is_degenerate():
    src = np.array([[0.0, 0.0], [1.0, 1.0], [2.0, 2.0]])
    assert EstimatorAffine2D().estimateModel(src, src, [0, 1, 2]) == []


def test_projective3d_five_points(rng):
    T = np.array([[1.0, 0.1, 0.0, 2.0],
                  [0.0, 0.9, 0.2, -1.0],
                  [0.1, 0.0, 1.1, 0.5],
                  [1e-3, 2e-3, -1e-3, 1.0]])
    src = rng.uniform(-10.0, 10.0, (5, 3))
    dst = ProjectiveTransformation3D(T).transform(src)
    estimator = EstimatorProjective3D()
    models = estimator.estimateModel(src, dst, [0, 1, 2, 3, 4])
    assert len(models) == 1
    np.testing.assert_allclose(models[0].descriptor / models[0].descriptor[3, 3], T, rtol=1e-7, atol=1e-9)
    assert estimator.modelToParameters(models[0]).shape == (15,)


def test_normalize_points():
    points = np.array([[0.0, 0.0], [2.0, 0.0], [2.0, 2.0], [0.0, 2.0]])
    normalized, transform = normalizePoints(points)
    np.testing.assert_allclose(normalized.mean(axis=0), [0.0, 0.0], atol=1e-12)
    np.testing.assert_allclose(np.mean(np.linalg.norm(normalized, axis=1)), np.sqrt(2.0))
    homogeneous = np.c_[points, np.ones(4)] @ transform.T
    np.testing.assert_allclose(homogeneous[:, :2], normalized)


def test_duplicate_indices_are_invalid_sample():
    lines = np.array([[1.0, 0.0, 0.0], [0.0, 1.0, 0.0]])
    assert not EstimatorPoint2D().isValidSample(lines, None, [1, 1])


def test_solvers_return_no_model_for_nan_sample(rng):
    """ 含 NaN 的样本是退化样本，求解器返回空列表而不是抛出异常 """
    src = rng.uniform(-10.0, 10.0, (6, 3))
    dst = rng.uniform(-10.0, 10.0, (6, 3))
    src[2, 1] = np.nan

    assert SolverPointTwoLines().estimateModel(src[1:3], None, None) == []
    assert SolverPointThreePlanes().estimateModel(np.c_[src[:3], np.ones(3)], None, None) == []
    assert SolverHomographyFourPoint().estimateModel(src[:4, :2], dst[:4, :2], None) == []
    assert SolverAffineThreePoint().estimateModel(src[:3, :2], dst[:3, :2], None) == []
    assert SolverProjective3DFivePoint().estimateModel(src[:5], dst[:5], None) == []
    assert SolverPinholeCameraDLT().estimateModel(src, dst[:, :2], None) == []


def test_estimators_with_normalization_skip_nan_sample(rng):
    H, src, dst = make_homography_points(rng, 4)
    dst[0, 0] = np.nan
    assert EstimatorHomography().estimateModel(src, dst, [0, 1, 2, 3]) == []

    src3d = rng.uniform(-10.0, 10.0, (5, 3))
    dst3d = src3d.copy()
    dst3d[4, 2] = np.inf
    assert EstimatorProjective3D().estimateModel(src3d, dst3d, [0, 1, 2, 3, 4]) == []

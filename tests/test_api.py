import random

import numpy as np

from conftest import make_camera, make_homography_points, make_lines, make_planes, make_scene_points, perturb
from model import AffineTransformation2D, ProjectiveTransformation3D
from robust import (RobustEstimatorMethod, estimatePinholeCamera, estimatePoint2D,
                    estimatePoint3D, findAffineTransform, findHomography,
                    findProjectiveTransform3D)


def test_find_homography_mask(rng):
    H, src, dst = make_homography_points(rng, 100)
    noisy, outliers, _ = perturb(rng, dst, 0.25, 50.0)
    found, mask = findHomography(src, noisy, threshold=1e-3)
    np.testing.assert_allclose(found, H, rtol=1e-6, atol=1e-8)
    assert mask.dtype == np.uint8
    np.testing.assert_array_equal(mask.astype(bool), ~outliers)


def test_find_homography_promeds(rng):
    H, src, dst = make_homography_points(rng, 100)
    noisy, outliers, errors = perturb(rng, dst, 0.25, 50.0)
    quality = 1.0 / (1.0 + errors)
    found, mask = findHomography(src, noisy, method=RobustEstimatorMethod.PROMEDS,
                                 quality_scores=quality, threshold=1e-3)
    np.testing.assert_allclose(found, H, rtol=1e-6, atol=1e-8)


def test_find_affine_transform(rng):
    A = np.array([[0.8, 0.2, 1.0], [-0.1, 1.1, 3.0]])
    src = rng.uniform(0.0, 50.0, (80, 2))
    dst, outliers, _ = perturb(rng, AffineTransformation2D(A).transform(src), 0.3, 20.0)
    found, mask = findAffineTransform(src, dst, method=RobustEstimatorMethod.MSAC, threshold=1e-3)
    np.testing.assert_allclose(found, A, atol=1e-8)
    np.testing.assert_array_equal(mask.astype(bool), ~outliers)


def test_find_projective_transform3d(rng):
    T = np.array([[1.0, 0.0, 0.1, 1.0],
                  [0.1, 1.0, 0.0, 2.0],
                  [0.0, 0.2, 0.9, 3.0],
                  [1e-3, 0.0, 1e-3, 1.0]])
    src = rng.uniform(-20.0, 20.0, (60, 3))
    dst, outliers, _ = perturb(rng, ProjectiveTransformation3D(T).transform(src), 0.2, 20.0)
    found, mask = findProjectiveTransform3D(src, dst, method=RobustEstimatorMethod.LMEDS,
                                            threshold=1e-6)
    np.testing.assert_allclose(found, T, rtol=1e-6, atol=1e-8)
    assert mask.sum() == np.count_nonzero(~outliers)


def test_estimate_points(rng):
    point2d = np.array([-1.0, 4.0])
    lines, outliers = make_lines(rng, point2d, 50, outlier_ratio=0.2)
    model, mask = estimatePoint2D(lines, threshold=1e-6)
    np.testing.assert_allclose(model.descriptor, point2d, atol=1e-8)
    np.testing.assert_array_equal(mask.astype(bool), ~outliers)

    point3d = np.array([0.5, -2.0, 7.0])
    planes, outliers = make_planes(rng, point3d, 50, outlier_ratio=0.2)
    model, mask = estimatePoint3D(planes, method=RobustEstimatorMethod.LMEDS, threshold=1e-6)
    np.testing.assert_allclose(model.descriptor, point3d, atol=1e-8)
    np.testing.assert_array_equal(mask.astype(bool), ~outliers)


def test_estimate_pinhole_camera(rng):
    camera, intrinsic, rotation, center = make_camera(rng)
    points3d = make_scene_points(rng, rotation, center, 150)
    points2d, outliers, errors = perturb(rng, camera.project(points3d), 0.2, 100.0)
    random.seed(11)
    model, mask = estimatePinholeCamera(points3d, points2d, method=RobustEstimatorMethod.RANSAC,
                                        threshold=1e-5)
    np.testing.assert_allclose(model.project(points3d[~outliers]),
                               camera.project(points3d[~outliers]), atol=1e-5)
    np.testing.assert_array_equal(mask.astype(bool), ~outliers)

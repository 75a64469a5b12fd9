import numpy as np
import pytest

from utils import (LMedSScoringFunction, MSACScoringFunction, ProsacScoringFunction,
                   RansacScoringFunction, Score)


def test_ransac_threshold_is_inclusive():
    scoring = RansacScoringFunction()
    scoring.initialize(1.0, 4)
    score, inliers = scoring.getScore(np.array([0.0, 1.0, 1.0 + 1e-12, 5.0]))
    assert list(inliers) == [True, True, False, False]
    assert score.inlier_number == 2
    assert score.value == 2.0


def test_msac_threshold_is_inclusive_and_truncated():
    scoring = MSACScoringFunction()
    scoring.initialize(2.0, 3)
    score, inliers = scoring.getScore(np.array([1.0, 2.0, 10.0]))
    assert list(inliers) == [True, True, False]
    # 1 + 4 + min(100, 4)
    assert score.value == pytest.approx(-9.0)


def test_msac_lower_cost_is_better():
    scoring = MSACScoringFunction()
    scoring.initialize(1.0, 3)
    better, _ = scoring.getScore(np.array([0.1, 0.1, 0.1]))
    worse, _ = scoring.getScore(np.array([0.5, 0.5, 0.5]))
    assert better > worse
    assert worse < better


def test_prosac_ties_broken_by_residual_sum():
    scoring = ProsacScoringFunction()
    scoring.initialize(1.0, 3)
    tight, _ = scoring.getScore(np.array([0.1, 0.2, 3.0]))
    loose, _ = scoring.getScore(np.array([0.8, 0.9, 3.0]))
    assert tight.inlier_number == loose.inlier_number
    assert tight > loose


def test_lmeds_estimated_threshold():
    scoring = LMedSScoringFunction()
    scoring.initialize(1e-3, 11, 2, 1.5)
    residuals = np.arange(11, dtype=float)
    score, inliers = scoring.getScore(residuals)
    median = np.median(residuals ** 2)
    expected = 1.5 * 1.4826 * (1.0 + 5.0 / 9.0) * np.sqrt(median)
    assert score.value == pytest.approx(-median)
    assert score.estimated_threshold == pytest.approx(expected)
    assert np.array_equal(inliers, residuals <= expected)


def test_lmeds_uses_stop_threshold_as_minimum():
    scoring = LMedSScoringFunction()
    scoring.initialize(0.5, 5, 2, 1.5)
    score, inliers = scoring.getScore(np.array([0.0, 0.0, 0.0, 0.4, 7.0]))
    assert score.estimated_threshold == 0.0
    assert list(inliers) == [True, True, True, True, False]


def test_lmeds_sample_size_equal_to_point_number():
    scoring = LMedSScoringFunction()
    scoring.initialize(1e-3, 3, 3, 1.5)
    score, _ = scoring.getScore(np.array([1.0, 1.0, 1.0]))
    assert score.estimated_threshold == pytest.approx(1.5 * 1.4826)


def test_score_comparison():
    a, b = Score(), Score()
    a.value, b.value = 3.0, 2.0
    assert a > b
    assert b < a
    assert not a == b

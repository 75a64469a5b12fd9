import logging
from copy import deepcopy
from time import time

import cv2
import matplotlib as mpl
import matplotlib.pyplot as plt
import numpy as np

import robust as rb


gt_H = np.array([[1.1, 0.05, 5.0],
                 [0.02, 0.95, -3.0],
                 [1e-4, 2e-4, 1.0]])


def getReprojectionError(src_pts, dst_pts, H):
    """ 源点经 H 投影后与目标点的平均平方距离 """
    projected = np.c_[src_pts, np.ones(len(src_pts))] @ H.T
    projected = projected[:, :2] / projected[:, 2:]
    return np.mean(np.sum(np.square(projected - dst_pts), axis=1))


def generateCorrespondences(point_number=500, outlier_ratio=0.4, noise=0.5, seed=0):
    """ 生成带噪声和外点的单应点对，以及与误差相关的匹配质量 """
    rng = np.random.default_rng(seed)
    src_pts = rng.uniform(0.0, 640.0, (point_number, 2))
    projected = np.c_[src_pts, np.ones(point_number)] @ gt_H.T
    dst_pts = projected[:, :2] / projected[:, 2:]

    errors = rng.normal(0.0, noise, (point_number, 2))
    outliers = rng.uniform(size=point_number) < outlier_ratio
    errors[outliers] = rng.uniform(-200.0, 200.0, (np.count_nonzero(outliers), 2))
    dst_pts = dst_pts + errors

    # 外点的匹配质量较低
    quality_scores = 1.0 / (1.0 + np.linalg.norm(errors, axis=1)) + rng.uniform(0.0, 0.1, point_number)
    return src_pts, dst_pts, quality_scores, outliers


def draw_inliers(ax, src_pts, dst_pts, mask, title):
    inliers = mask.astype(bool)
    ax.quiver(src_pts[inliers, 0], src_pts[inliers, 1],
              dst_pts[inliers, 0] - src_pts[inliers, 0], dst_pts[inliers, 1] - src_pts[inliers, 1],
              color='g', angles='xy', scale_units='xy', scale=1, width=0.002)
    ax.scatter(src_pts[~inliers, 0], src_pts[~inliers, 1], s=4, c='r')
    ax.set_title(title)


def testHomography(src_pts, dst_pts, quality_scores, threshold=1.0):
    methods = list(rb.RobustEstimatorMethod)
    mask_list = []
    for method in methods:
        t = time()
        print(method.name)
        # 中值类方法把 threshold 作为终止阈值
        H, mask = rb.findHomography(src_pts, dst_pts, method=method, quality_scores=quality_scores,
                                    threshold=threshold, conf=0.99, max_iters=5000)
        print('Inlier number = ', deepcopy(mask).astype(np.float32).sum() / np.shape(src_pts)[0])
        print('Elapsed time = ', time() - t)
        print('Error = ', getReprojectionError(src_pts[mask.astype(bool)], dst_pts[mask.astype(bool)], H), '\n')
        mask_list.append(mask)

    t = time()
    print('CV2-RANSAC')
    H, mask = cv2.findHomography(src_pts, dst_pts, cv2.RANSAC, ransacReprojThreshold=threshold,
                                 confidence=0.99, maxIters=5000)
    print('Inlier number = ', deepcopy(mask).astype(np.float32).sum() / np.shape(src_pts)[0])
    print('Elapsed time = ', time() - t, '\n')

    # 绘制各方法的内点对比图
    plt.figure(figsize=(12, 8))
    mpl.rcParams.update({'font.size': 8})
    for i, method in enumerate(methods):
        ax = plt.subplot(2, 3, i + 1)
        draw_inliers(ax, src_pts, dst_pts, mask_list[i], method.name.lower())
    ax = plt.subplot(2, 3, 6)
    draw_inliers(ax, src_pts, dst_pts, mask.ravel(), 'cv-ransac')
    plt.show()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format='%(asctime)s %(name)s %(levelname)s %(message)s')

    src_pts, dst_pts, quality_scores, outliers = generateCorrespondences()
    print(f"Correspondences number = {len(src_pts)}")
    print(f"Outliers number = {np.count_nonzero(outliers)}", '\n')

    # 测试单应矩阵
    testHomography(src_pts, dst_pts, quality_scores, 1.0)

import numpy as np
from numpy import linalg

from model import Homography
from solver.solver_engine import SolverEngine


class SolverHomographyFourPoint(SolverEngine):
	""" 四点法求解单应矩阵模型参数 """

	def sampleSize(self):
		""" 模型参数估计所需的最小样本数 """
		return 4

	def estimateModel(self, inputs, outputs, sample):
		""" 从给定的样本点拟合单应矩阵，h33 固定为 1

		参数
		----------
		inputs : numpy
			源图像点集 (n, 2)
		outputs : numpy
			目标图像点集 (n, 2)
		sample : list
			用于估计模型的样本点序号列表，None 表示使用全部点

		返回
		----------
		list(Model)
			通过样本估计的模型列表
		"""
		if sample is None:
			sample = [i for i in range(np.shape(inputs)[0])]
		sample_number = len(sample)
		coefficients = np.zeros([2 * sample_number, 8])
		inhomogeneous = np.zeros(2 * sample_number)

		row_idx = 0
		for sample_idx in sample:
			# 取点的坐标
			x1, y1 = inputs[sample_idx]
			x2, y2 = outputs[sample_idx]

			# 参数矩阵设置
			coefficients[row_idx] = [-x1, -y1, -1, 0, 0, 0, x2 * x1, x2 * y1]
			inhomogeneous[row_idx] = -x2
			row_idx += 1

			coefficients[row_idx] = [0, 0, 0, -x1, -y1, -1, y2 * x1, y2 * y1]
			inhomogeneous[row_idx] = -y2
			row_idx += 1

		if not np.all(np.isfinite(coefficients)) or not np.all(np.isfinite(inhomogeneous)):
			return []

		# 利用 QR 分解求解 x，R 的对角元接近零说明样本退化
		try:
			Q, R = linalg.qr(coefficients)
			diagonal = np.abs(np.diag(R))
			if diagonal.min() <= 1e-10 * max(diagonal.max(), 1.0):
				return []
			h = linalg.solve(R, Q.T @ inhomogeneous).tolist()
		except linalg.LinAlgError:
			return []
		h.append(1.0)

		model = Homography(matrix=np.array(h).reshape((3, 3)))
		return [model]

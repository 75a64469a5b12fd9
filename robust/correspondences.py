import numpy as np


class CorrespondenceStore:
    """ 对应点集和质量评分的存储

    对应点以引用方式保存，numpy 数组不会被复制，估计过程中调用者不得修改这些数组
    """

    def __init__(self, sample_size):
        self.sample_size = sample_size  # 最小样本大小 M
        self.inputs = None              # 输入序列 (N, d1)
        self.outputs = None             # 输出序列 (N, d2)，单序列问题为 None
        self.quality_scores = None      # 质量评分 (N,)

    @property
    def point_number(self):
        if self.inputs is None:
            return 0
        return np.shape(self.inputs)[0]

    def setCorrespondences(self, inputs, outputs=None):
        """ 设置对应点集

        参数
        ----------
        inputs : array_like
            输入序列，至少 M 个元素
        outputs : array_like 可选
            输出序列，必须与输入序列长度相同

        异常
        ----------
        ValueError
            序列长度小于 M，或两个序列长度不一致
        """
        inputs = np.asarray(inputs, dtype=float)
        if inputs.ndim == 1:
            inputs = inputs.reshape(-1, 1)
        if np.shape(inputs)[0] < self.sample_size:
            raise ValueError(f'对应点数目 {np.shape(inputs)[0]} 小于最小样本大小 {self.sample_size}')
        if outputs is not None:
            outputs = np.asarray(outputs, dtype=float)
            if outputs.ndim == 1:
                outputs = outputs.reshape(-1, 1)
            if np.shape(outputs)[0] != np.shape(inputs)[0]:
                raise ValueError('输入序列和输出序列的长度不一致')
        self.inputs = inputs
        self.outputs = outputs

    def setQualityScores(self, quality_scores):
        """ 设置质量评分，评分越高的对应点越可能是内点

        异常
        ----------
        ValueError
            评分数目小于已有对应点数目，或未设置对应点时小于 M
        """
        quality_scores = np.asarray(quality_scores, dtype=float).ravel()
        minimum = self.point_number if self.inputs is not None else self.sample_size
        if len(quality_scores) < minimum:
            raise ValueError(f'质量评分数目 {len(quality_scores)} 小于 {minimum}')
        self.quality_scores = quality_scores

    def hasCorrespondences(self):
        return self.inputs is not None

    def isReady(self, requires_quality_scores=False):
        if self.inputs is None:
            return False
        if requires_quality_scores:
            return self.quality_scores is not None and \
                len(self.quality_scores) == self.point_number
        return True

    def select(self, mask):
        """ 返回 mask 选中的对应点子集 """
        inputs = self.inputs[mask]
        outputs = self.outputs[mask] if self.outputs is not None else None
        return inputs, outputs

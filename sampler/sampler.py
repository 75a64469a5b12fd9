class Sampler:
    """ 采样器基类 """

    def __init__(self, point_number, sample_size):
        self.point_number = point_number  # 采样的数据集大小 N
        self.sample_size = sample_size    # 最小样本大小 M
        self.initialized = False          # 采样器是否被初始化

    def sample(self):
        """ 产生一个最小样本

        返回
        ----------
        list
            M 个不重复的数据点序号
        """
        pass

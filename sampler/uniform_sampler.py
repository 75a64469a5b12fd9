from .sampler import Sampler
from utils.uniform_random_generator import UniformRandomGenerator


class UniformSampler(Sampler):
    """ 均匀随机采样器 """

    def __init__(self, point_number, sample_size):
        super().__init__(point_number, sample_size)
        self.random_generator = UniformRandomGenerator()
        self.initialized = self.__initialize()

    def __initialize(self):
        """ 初始化样本构建，必须在样本被调用前"""
        if self.point_number < self.sample_size:
            return False
        self.random_generator.resetGenerator(0, self.point_number - 1)
        return True

    def sample(self):
        """ 从 [0, N) 中均匀选取 M 个不重复的序号 """
        if not self.initialized:
            return []
        return self.random_generator.generateUniqueRandomSet(self.sample_size)

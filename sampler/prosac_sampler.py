import math as m

import numpy as np

from .sampler import Sampler
from utils.uniform_random_generator import UniformRandomGenerator


class ProsacSampler(Sampler):
    """ PROSAC 渐进采样器 """

    def __init__(self, quality_scores, sample_size, ransac_convergence_iterations=5000):
        """ 初始化 PROSAC 采样器

        参数
        ----------
        quality_scores : numpy
            每个数据点的质量评分，评分越高越先被采样
        sample_size : int
            采样的样本数
        ransac_convergence_iterations : int 可选
            T_N，超过该迭代次数后 PROSAC 退化为均匀采样
        """
        super().__init__(len(quality_scores), sample_size)
        self.random_generator = UniformRandomGenerator()

        self.ransac_convergence_iterations = ransac_convergence_iterations
        self.kth_sample_number = 1      # prosac 采样迭代次数
        self.subset_size = 0            # 当前采样池的大小 n
        self.growth_function = []       # PROSAC 增长函数
        # 按质量评分降序排列的数据点序号，评分相同时保持原顺序
        self.sorted_indices = np.argsort(-np.asarray(quality_scores, dtype=float), kind='stable')

        self.initialized = self.initialize()

    def initialize(self):
        """ PROSAC 采样初始化 growth_function """
        if self.point_number < self.sample_size:
            return False
        self.growth_function = [0 for i in range(self.point_number)]

        # 数据点 U_N 按质量降序排列，{Mi}i = 1...T_N 为 RANSAC 从 U_N 中均匀抽取的样本序列
        # T_n 为 {Mi} 中只包含 U_n 中点的样本的平均数目
        #                                  n - i
        # T_n = T_N * Product i = 0...m-1 -------, n >= sample size, N = points size
        #                                  N - i
        T_n = self.ransac_convergence_iterations
        for i in range(self.sample_size):
            T_n *= (self.sample_size - i) / (self.point_number - i)

        T_n_prime = 1
        # 递推关系
        #             n + 1
        # T(n+1) = --------- T(n), m is sample size.
        #           n + 1 - m
        # 增长函数 g(t) = min {n, T'_(n) >= t}
        # T'_(n+1) = T'_(n) + (T_(n+1) - T_(n))
        for i in range(self.point_number):
            if i + 1 <= self.sample_size:
                self.growth_function[i] = T_n_prime
                continue
            Tn_plus1 = float(i + 1) * T_n / (i + 1 - self.sample_size)
            self.growth_function[i] = T_n_prime + m.ceil(Tn_plus1 - T_n)
            T_n = Tn_plus1
            T_n_prime = self.growth_function[i]

        self.subset_size = self.sample_size

        # 子集的最后一个点总会被选中，其余点从 [0, subset_size-2] 中选取
        self.random_generator.resetGenerator(0, self.subset_size - 2)
        return True

    def sample(self):
        """ 产生下一个 PROSAC 样本

        返回
        ----------
        list
            采样的数据点序号列表（原始顺序中的序号）
        """
        if not self.initialized:
            return []

        # PROSAC 采样与 RANSAC 相同，则均匀随机采样
        if self.kth_sample_number > self.ransac_convergence_iterations:
            subset = self.random_generator.generateUniqueRandomSet(self.sample_size)
        else:
            subset = self.random_generator.generateUniqueRandomSet(self.sample_size - 1)
            # 最后一个索引是当前使用的子集末尾的点的索引
            subset.append(self.subset_size - 1)
        self.__incrementIterationNumber()
        return [int(self.sorted_indices[i]) for i in subset]

    def __incrementIterationNumber(self):
        self.kth_sample_number += 1  # PROSAC 迭代数自增

        # 如果与 RANSAC 完全相同，则设置随机生成器以从所有可能的索引生成值
        if self.kth_sample_number > self.ransac_convergence_iterations:
            self.subset_size = self.point_number
            self.random_generator.resetGenerator(0, self.point_number - 1)
        # 根据需要增加采样池的大小
        elif self.kth_sample_number > self.growth_function[self.subset_size - 1] and \
                self.subset_size < self.point_number:
            self.subset_size += 1  # n = n + 1
            # 重置随机生成器以从当前点子集生成值，但最后一个除外，因为它将始终被使用
            self.random_generator.resetGenerator(0, self.subset_size - 2)

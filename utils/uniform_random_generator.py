import random


class UniformRandomGenerator:
    """ 均匀随机数产生器 """

    def __init__(self):
        self.range_min = 0       # 可取最小值
        self.range_max = 100000  # 可取最大值

    def resetGenerator(self, range_min, range_max):
        """ 设置随机数发生器的随机数范围 [range_min, range_max]

        参数
        ----------
        range_min : int
            可取最小值
        range_max : int
            可取最大值
        """
        self.range_min, self.range_max = range_min, range_max

    def generateUniqueRandomSet(self, sample_size):
        """ 在 [range_min, range_max] 中产生一个不重复的均匀随机序列

        参数
        ----------
        sample_size : int
            选取样本大小

        返回
        ----------
        list
            产生的随机序列样本列表

        异常
        ----------
        ValueError
            可取值的数目少于 sample_size
        """
        available = self.range_max - self.range_min + 1
        if sample_size > available:
            raise ValueError(f'无法从 {available} 个候选值中选取 {sample_size} 个不重复的随机数')

        sample = []
        while len(sample) < sample_size:
            rand_num = self.__getRandomNumber()
            # 如果产生的数不和前面重复，则加入样本
            if rand_num in sample:
                continue
            sample.append(rand_num)
        return sample

    def __getRandomNumber(self):
        """ 产生一个均匀随机整数 """
        return random.randint(self.range_min, self.range_max)

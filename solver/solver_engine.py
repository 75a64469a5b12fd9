class SolverEngine:
    """ 最小样本模型参数求解器基类 """

    def __init__(self):
        pass

    def returnMultipleModels(self):
        """ 确定是否有可能返回多个模型 """
        return False

    def sampleSize(self):
        """ 模型参数估计所需的最小样本数 """
        return 0

    def estimateModel(self, inputs, outputs, sample):
        """ 从给定的样本点拟合模型参数

        参数
        ----------
        inputs : numpy
            输入序列
        outputs : numpy
            输出序列，单序列问题为 None
        sample : list
            用于估计模型的样本点序号列表，None 表示使用全部点

        返回
        ----------
        list(Model)
            通过样本估计的模型列表，样本退化时为空列表
        """
        return []

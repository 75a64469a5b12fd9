class EstimatorException(Exception):
    """ 估计器异常基类 """
    pass


class LockedException(EstimatorException):
    """ 估计器处于锁定状态（估计过程中）时修改参数或重复调用 estimate 引发的异常 """
    pass


class NotReadyException(EstimatorException):
    """ 输入数据不完整时调用 estimate 引发的异常 """
    pass


class RobustEstimatorException(EstimatorException):
    """ 鲁棒估计失败：迭代次数耗尽未找到有效模型，或数值计算失败 """
    pass


class RefinerException(EstimatorException):
    """ 模型精化失败，由估计器捕获并返回未精化的模型 """
    pass

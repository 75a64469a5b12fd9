class RobustEstimatorListener:
    """ 鲁棒估计过程的监听器基类

    所有回调都在调用 estimate 的线程中同步执行，估计器在回调期间处于锁定状态，
    回调中可以读取估计器状态，但任何修改都会引发 LockedException
    """

    def onEstimateStart(self, estimator):
        """ 估计开始 """
        pass

    def onEstimateEnd(self, estimator):
        """ 估计结束 """
        pass

    def onEstimateNextIteration(self, estimator, iteration):
        """ 完成一次迭代

        参数
        ----------
        estimator : RobustEstimator
            触发回调的估计器
        iteration : int
            已完成的迭代次数，从 1 开始
        """
        pass

    def onEstimateProgressChange(self, estimator, progress):
        """ 估计进度变化，progress 取值 [0, 1] """
        pass

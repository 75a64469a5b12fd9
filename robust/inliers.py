class InliersData:
    """ 最佳模型对应的内点信息 """

    def __init__(self,
                 inlier_number,
                 inliers=None,
                 residuals=None,
                 estimated_threshold=None):
        self.inlier_number = inlier_number              # 内点数目
        self.inliers = inliers                          # 内点 mask (bool)，未保留时为 None
        self.residuals = residuals                      # 每个对应点的残差，未保留时为 None
        self.estimated_threshold = estimated_threshold  # 中值类方法估计的阈值，其余方法为 None

    def __repr__(self):
        return f'InliersData(inlier_number={self.inlier_number}, ' \
               f'estimated_threshold={self.estimated_threshold})'

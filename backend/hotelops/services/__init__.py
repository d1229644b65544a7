"""
服务层 - 业务操作
"""

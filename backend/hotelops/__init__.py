"""
HotelOps - 多租户酒店运营后台
房间库存一致性引擎 + 二维码客房服务请求流程
"""

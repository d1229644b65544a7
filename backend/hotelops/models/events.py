"""
领域事件定义 (Domain Events)
客人和服务请求的变更事件，同时也是推送给前台看板的消息类型
"""
from enum import Enum
from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Optional, Dict, Any

from hotelops.database import utcnow


class EventType(str, Enum):
    """事件类型枚举（取值即推送消息的 type 字段）"""
    # 客人相关
    CUSTOMER_ADDED = "customer_added"
    CUSTOMER_UPDATED = "customer_updated"

    # 服务请求相关
    SERVICE_REQUEST_CREATED = "service_request_created"
    SERVICE_REQUEST_UPDATED = "service_request_updated"


# 需要推送给在线看板的事件
BROADCAST_EVENTS = (
    EventType.CUSTOMER_ADDED,
    EventType.CUSTOMER_UPDATED,
    EventType.SERVICE_REQUEST_CREATED,
    EventType.SERVICE_REQUEST_UPDATED,
)


@dataclass
class BaseEventData:
    """事件数据基类"""
    timestamp: datetime = field(default_factory=utcnow)

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典"""
        result = asdict(self)
        # 处理 datetime 序列化
        for key, value in result.items():
            if isinstance(value, datetime):
                result[key] = value.isoformat()
        return result


@dataclass
class CustomerEventData(BaseEventData):
    """客人变更事件数据"""
    hotel_id: str = ""
    customer_id: str = ""
    action: str = ""  # check_in, check_out, reactivate, update, delete
    record: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ServiceRequestEventData(BaseEventData):
    """服务请求变更事件数据"""
    hotel_id: str = ""
    service_request_id: str = ""
    old_status: Optional[str] = None
    new_status: str = ""
    operator: Optional[str] = None
    record: Dict[str, Any] = field(default_factory=dict)


def customer_record(customer) -> Dict[str, Any]:
    """客人记录的 JSON 形式（推送消息 data 字段）"""
    from hotelops.models.schemas import CustomerResponse
    return CustomerResponse.model_validate(customer).model_dump(mode="json")


def service_request_record(service_request) -> Dict[str, Any]:
    """服务请求记录的 JSON 形式（推送消息 data 字段）"""
    from hotelops.models.schemas import ServiceRequestResponse
    return ServiceRequestResponse.model_validate(service_request).model_dump(mode="json")

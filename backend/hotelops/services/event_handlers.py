"""
事件处理器
订阅客人和服务请求变更事件，转发给对应酒店的在线看板
"""
import logging

from hotelops.services.event_bus import event_bus, Event
from hotelops.services.connection_manager import connection_manager
from hotelops.models.events import BROADCAST_EVENTS

logger = logging.getLogger(__name__)


class EventHandlers:
    """
    事件处理器集合

    支持注入连接管理器以便于测试
    """

    def __init__(self, manager=None):
        self._manager = manager or connection_manager
        self._registered = False

    def handle_broadcast(self, event: Event) -> None:
        """
        把领域事件转成推送消息：{"type": 事件类型, "data": 记录 JSON}

        没有 hotel_id 的事件无法分组，记录警告后忽略
        """
        data = event.data
        hotel_id = data.get('hotel_id')
        if not hotel_id:
            logger.warning(f"Invalid {event.event_type} event: missing hotel_id")
            return

        message = {
            "type": str(getattr(event.event_type, "value", event.event_type)),
            "data": data.get('record', {}),
        }
        self._manager.schedule_broadcast(hotel_id, message)

    def register_handlers(self, event_bus_instance=None) -> None:
        """注册所有事件处理器"""
        if self._registered:
            return

        bus = event_bus_instance or event_bus
        for event_type in BROADCAST_EVENTS:
            bus.subscribe(event_type, self.handle_broadcast)

        self._registered = True
        logger.info("Event handlers registered successfully")

    def unregister_handlers(self, event_bus_instance=None) -> None:
        """取消注册所有事件处理器（用于测试）"""
        bus = event_bus_instance or event_bus
        for event_type in BROADCAST_EVENTS:
            bus.unsubscribe(event_type, self.handle_broadcast)

        self._registered = False
        logger.info("Event handlers unregistered")


# 全局事件处理器实例
event_handlers = EventHandlers()


def register_event_handlers():
    """注册所有事件处理器（应用启动时调用）"""
    event_handlers.register_handlers()

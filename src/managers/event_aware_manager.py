"""
event_aware_manager.py
EventHubに対応したマネージャー基本クラス

すべてのマネージャーはapp_stateを共有し、app_state["event_hub"]があれば
自身の名前をソースとしてイベントを発行する。
"""
from typing import Dict, Any, Optional, Callable
from event_hub import EventHub, EventType, Event, EventPriority


class EventAwareManager:
    """
    EventHubに対応したマネージャーの基底クラス
    """

    def __init__(
        self,
        app_state: Dict[str, Any],
        ui_controls: Optional[Dict[str, Any]] = None,
        page=None,
        manager_name: str = "manager",
        event_hub: Optional[EventHub] = None
    ):
        """
        EventAwareManagerを初期化します。

        Args:
            app_state (Dict[str, Any]): アプリケーションの状態
            ui_controls (Dict[str, Any], optional): UIコントロール
            page: アプリケーションのページ
            manager_name (str): マネージャーの名前（イベントソース識別用）
            event_hub (EventHub, optional): イベントハブ。省略時はapp_state["event_hub"]を使う
        """
        self.app_state = app_state
        self.ui_controls = ui_controls if ui_controls is not None else {}
        self.page = page
        self.manager_name = manager_name
        self._event_hub = event_hub
        self._subscriptions = []

    @property
    def event_hub(self) -> Optional[EventHub]:
        """EventHubへの参照（遅延取得）"""
        return self._event_hub or self.app_state.get("event_hub")

    def subscribe_to_event(self, event_type: EventType, handler: Callable[[Event], None]) -> None:
        """イベントタイプにハンドラーをサブスクライブします。"""
        if not self.event_hub:
            return
        self.event_hub.subscribe(event_type, handler)
        self._subscriptions.append((event_type, handler))

    def publish_event(
        self,
        event_type: EventType,
        data: Optional[Any] = None,
        priority: EventPriority = EventPriority.NORMAL
    ) -> None:
        """
        イベントを発行します。EventHubが無い場合は何もしません。

        Args:
            event_type (EventType): 発行するイベントタイプ
            data (Any, optional): イベントに関連するデータ
            priority (EventPriority, optional): イベントの優先度
        """
        if self.event_hub:
            self.event_hub.publish(
                event_type=event_type,
                data=data,
                source=self.manager_name,
                priority=priority
            )

    def cleanup(self) -> None:
        """サブスクリプションを解除します。"""
        if self.event_hub:
            for event_type, handler in self._subscriptions:
                self.event_hub.unsubscribe(event_type, handler)
        self._subscriptions.clear()

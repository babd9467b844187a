"""
event_hub.py
TransJSONのイベントハブシステムモジュール

各マネージャー間の疎結合な通信を実現するためのPubSubパターンを実装
イベントは発行したスレッドでそのまま同期的に配信される
"""
from typing import Dict, List, Any, Callable, Optional
from enum import Enum, auto
from collections import defaultdict
import time

from logging_config import get_logger, is_debug_mode

logger = get_logger(__name__)


class EventType(Enum):
    """イベントタイプの定義"""
    # ファイル関連イベント
    FILE_ADDED = auto()           # ファイルが追跡対象に追加された
    FILE_MERGED = auto()          # ファイルの内容がツリーにマージされた
    FILE_REMOVED = auto()         # ファイルが追跡対象から外された
    FILE_EXPORTED = auto()        # ファイルのJSONが書き出された
    TREE_CLEARED = auto()         # 最後のファイルが外れツリーが破棄された

    # ツリー構造関連イベント
    KEY_ADDED = auto()            # キーが追加された
    CATEGORY_ADDED = auto()       # カテゴリが追加された
    ENTITY_REMOVED = auto()       # キーまたはカテゴリが削除された
    ENTITY_RENAMED = auto()       # キーまたはカテゴリの名前が変更された
    VALUE_UPDATED = auto()        # 値が更新された

    # アプリケーション状態イベント
    SETTINGS_CHANGED = auto()     # 設定が変更された
    APP_ERROR = auto()            # エラーが発生した


class EventPriority(Enum):
    """イベント優先度の定義"""
    LOW = 0
    NORMAL = 1
    HIGH = 2
    HIGHEST = 3  # 最高優先度（致命的エラーなど）


class Event:
    """イベントクラス"""
    def __init__(
        self,
        event_type: EventType,
        data: Optional[Any] = None,
        source: Optional[str] = None,
        priority: EventPriority = EventPriority.NORMAL
    ):
        """
        イベントを初期化します。

        Args:
            event_type (EventType): イベントの種類
            data (Any, optional): イベントに関連するデータ
            source (str, optional): イベント発生元の識別子
            priority (EventPriority, optional): イベントの優先度
        """
        self.event_type = event_type
        self.data = data
        self.source = source
        self.priority = priority
        self.timestamp = time.time()


class EventHub:
    """
    イベントハブクラス

    マネージャーが発行したイベントを、そのイベントにサブスクライブしている
    コールバックに発行元スレッドで同期的に配信します。
    """

    def __init__(self):
        """EventHubを初期化します。"""
        self._subscribers: Dict[EventType, List[Callable[[Event], None]]] = defaultdict(list)

        # イベント履歴（デバッグ用）
        self._event_history: List[Event] = []
        self._max_history_size = 100
        self._debug_mode = False

    def subscribe(self, event_type: EventType, callback: Callable[[Event], None]) -> None:
        """
        指定されたイベントタイプにコールバック関数をサブスクライブします。

        Args:
            event_type (EventType): サブスクライブするイベントタイプ
            callback (Callable): イベント発生時に呼び出されるコールバック関数
        """
        if callback not in self._subscribers[event_type]:
            self._subscribers[event_type].append(callback)

    def unsubscribe(self, event_type: EventType, callback: Callable[[Event], None]) -> None:
        """
        指定されたイベントタイプからコールバック関数のサブスクリプションを解除します。

        Args:
            event_type (EventType): サブスクリプションを解除するイベントタイプ
            callback (Callable): 解除するコールバック関数
        """
        if event_type in self._subscribers and callback in self._subscribers[event_type]:
            self._subscribers[event_type].remove(callback)
            if not self._subscribers[event_type]:
                del self._subscribers[event_type]

    def publish(
        self,
        event_type: EventType,
        data: Optional[Any] = None,
        source: Optional[str] = None,
        priority: EventPriority = EventPriority.NORMAL
    ) -> None:
        """
        イベントを配信します。

        Args:
            event_type (EventType): 配信するイベントタイプ
            data (Any, optional): イベントに関連するデータ
            source (str, optional): イベント発生元の識別子
            priority (EventPriority, optional): イベントの優先度
        """
        event = Event(event_type, data, source, priority)

        if self._debug_mode:
            self._add_to_history(event)

        self._dispatch_event(event)

    def _dispatch_event(self, event: Event) -> None:
        """イベントをサブスクライバーに配信します。"""
        if event.event_type not in self._subscribers:
            return

        for callback in list(self._subscribers[event.event_type]):
            try:
                callback(event)
            except Exception as e:
                logger.error(f"Error in subscriber callback for {event.event_type.name}: {e}")
                if event.event_type != EventType.APP_ERROR:  # 無限ループ防止
                    self.publish(
                        EventType.APP_ERROR,
                        {"error": str(e), "original_event": event.event_type.name},
                        "event_hub",
                        EventPriority.HIGH
                    )

    def set_debug_mode(self, enabled: bool, max_history_size: int = 100) -> None:
        """
        デバッグモードを設定します。無効にすると履歴はクリアされます。

        Args:
            enabled (bool): デバッグモードを有効にするかどうか
            max_history_size (int, optional): 履歴の最大サイズ
        """
        self._debug_mode = enabled
        self._max_history_size = max_history_size
        if not enabled:
            self._event_history.clear()

    def _add_to_history(self, event: Event) -> None:
        """イベント履歴に追加します。"""
        self._event_history.append(event)
        if len(self._event_history) > self._max_history_size:
            self._event_history = self._event_history[-self._max_history_size:]

    def get_event_history(self) -> List[Dict[str, Any]]:
        """
        イベント履歴を取得します。

        Returns:
            List[Dict[str, Any]]: イベント履歴のリスト
        """
        return [
            {
                "type": event.event_type.name,
                "data": event.data,
                "source": event.source,
                "priority": event.priority.name,
                "timestamp": event.timestamp
            }
            for event in self._event_history
        ]

    def clear_event_history(self) -> None:
        """イベント履歴をクリアします。"""
        self._event_history.clear()


def create_event_hub() -> EventHub:
    """
    EventHubのインスタンスを作成します。DEBUG_MODEが有効ならイベント履歴を記録します。

    Returns:
        EventHub: EventHubのインスタンス
    """
    event_hub = EventHub()
    if is_debug_mode():
        event_hub.set_debug_mode(True)
    return event_hub

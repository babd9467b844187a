"""
test_event_hub.py
EventHubのテストモジュール
"""
from unittest.mock import patch
import unittest

import event_hub
from event_hub import EventHub, EventType, create_event_hub


class TestEventHub(unittest.TestCase):
    """EventHubのテスト"""

    def setUp(self):
        self.hub = EventHub()
        self.received = []

    def _callback(self, event):
        self.received.append(event)

    def test_publish_is_synchronous_by_default(self):
        """既定ではpublishから戻る前に配信されることを確認"""
        self.hub.subscribe(EventType.FILE_ADDED, self._callback)
        self.hub.publish(EventType.FILE_ADDED, {"file_name": "en.json"}, "test")

        self.assertEqual(len(self.received), 1)
        self.assertEqual(self.received[0].data, {"file_name": "en.json"})
        self.assertEqual(self.received[0].source, "test")

    def test_subscribe_twice_delivers_once(self):
        self.hub.subscribe(EventType.KEY_ADDED, self._callback)
        self.hub.subscribe(EventType.KEY_ADDED, self._callback)
        self.hub.publish(EventType.KEY_ADDED)
        self.assertEqual(len(self.received), 1)

    def test_unsubscribe(self):
        self.hub.subscribe(EventType.KEY_ADDED, self._callback)
        self.hub.unsubscribe(EventType.KEY_ADDED, self._callback)
        self.hub.publish(EventType.KEY_ADDED)
        self.assertEqual(self.received, [])

    def test_only_matching_type_is_delivered(self):
        self.hub.subscribe(EventType.FILE_REMOVED, self._callback)
        self.hub.publish(EventType.FILE_ADDED)
        self.assertEqual(self.received, [])

    def test_failing_subscriber_reports_app_error(self):
        """サブスクライバーの例外がAPP_ERRORとして通知され、他の配信は続くことを確認"""
        def broken(event):
            raise RuntimeError("boom")

        errors = []
        self.hub.subscribe(EventType.TREE_CLEARED, broken)
        self.hub.subscribe(EventType.TREE_CLEARED, self._callback)
        self.hub.subscribe(EventType.APP_ERROR, errors.append)

        with self.assertLogs("transjson.event_hub", level="ERROR"):
            self.hub.publish(EventType.TREE_CLEARED)

        self.assertEqual(len(self.received), 1)
        self.assertEqual(len(errors), 1)
        self.assertEqual(errors[0].data["original_event"], "TREE_CLEARED")
        self.assertEqual(errors[0].source, "event_hub")

    def test_debug_history(self):
        """デバッグモードでのみ履歴が残ることを確認"""
        self.hub.publish(EventType.FILE_ADDED)
        self.assertEqual(self.hub.get_event_history(), [])

        self.hub.set_debug_mode(True, max_history_size=2)
        for event_type in (EventType.FILE_ADDED, EventType.FILE_MERGED, EventType.FILE_REMOVED):
            self.hub.publish(event_type)
        self.assertEqual(
            [entry["type"] for entry in self.hub.get_event_history()],
            ["FILE_MERGED", "FILE_REMOVED"]
        )

        self.hub.clear_event_history()
        self.assertEqual(self.hub.get_event_history(), [])

    def test_create_event_hub_follows_debug_mode(self):
        """DEBUG_MODEが有効な場合だけ履歴を記録するハブが作られることを確認"""
        with patch.object(event_hub, "is_debug_mode", return_value=True):
            hub = create_event_hub()
        hub.publish(EventType.FILE_ADDED)
        self.assertEqual(len(hub.get_event_history()), 1)

        with patch.object(event_hub, "is_debug_mode", return_value=False):
            hub = create_event_hub()
        hub.publish(EventType.FILE_ADDED)
        self.assertEqual(hub.get_event_history(), [])


if __name__ == '__main__':
    unittest.main()

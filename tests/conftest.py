"""
テスト用の共通フィクスチャと設定を提供するモジュール。
"""
import os
import sys

import pytest

# srcをインポートパスに追加（pytestのpythonpath設定が無い環境向け）
SRC_DIR = os.path.join(os.path.dirname(__file__), '..', 'src')
if os.path.abspath(SRC_DIR) not in [os.path.abspath(p) for p in sys.path]:
    sys.path.insert(0, os.path.abspath(SRC_DIR))

from event_hub import EventHub
from translation_model import TranslationFile


@pytest.fixture
def event_hub():
    """同期配信のEventHubを返す。"""
    return EventHub()


@pytest.fixture
def app_state(event_hub):
    """EventHubだけを登録したアプリケーション状態を返す。"""
    return {"event_hub": event_hub}


@pytest.fixture
def recorded_events(event_hub):
    """
    発行されたイベントを記録するリストを返す。
    EventHubのデバッグ履歴を使う。
    """
    event_hub.set_debug_mode(True, max_history_size=1000)

    def _types():
        return [entry["type"] for entry in event_hub.get_event_history()]

    return _types


@pytest.fixture
def english_file():
    """英語の翻訳ファイルを返す。"""
    return TranslationFile("en.json", {
        "title": "Hello",
        "menu": {
            "open": "Open",
            "save": "Save",
            "recent": {"clear": "Clear recent"},
        },
        "footer": "Bye",
    })


@pytest.fixture
def french_file():
    """一部のキーだけを持つフランス語の翻訳ファイルを返す。"""
    return TranslationFile("fr.json", {
        "menu": {
            "save": "Enregistrer",
            "close": "Fermer",
        },
        "title": "Bonjour",
    })


@pytest.fixture
def json_dir(tmp_path):
    """翻訳ファイルを書き込むための一時ディレクトリを返す。"""
    return tmp_path

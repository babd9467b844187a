"""設定管理マネージャー"""
import json
import os
from typing import Dict, Any, Optional

from error_handling import AppError, ErrorCategory, ErrorSeverity
from event_hub import EventType
from logging_config import get_logger
from .event_aware_manager import EventAwareManager
from .merge_manager import ValuePolicy

logger = get_logger(__name__)

MIN_INDENT = 0
MAX_INDENT = 10
MAX_RECENT_FILES = 10

DEFAULT_SETTINGS: Dict[str, Any] = {
    "indent": 2,
    "default_root_name": "Default",
    "invalid_value_policy": ValuePolicy.REJECT.value,
    "recent_files": [],
}


class SettingsManager(EventAwareManager):
    """アプリケーション設定の管理を担当するマネージャー"""

    def __init__(self, app_state: Dict[str, Any], settings_file: Optional[str] = None, event_hub=None):
        """SettingsManagerの初期化

        Args:
            app_state: アプリケーション状態辞書
            settings_file: 設定ファイルのパス（省略時は storage/data/settings.json）
            event_hub: イベントハブ（省略時はapp_stateから取得）
        """
        super().__init__(app_state, manager_name="settings_manager", event_hub=event_hub)
        self._settings_file = settings_file or os.path.join(
            os.path.dirname(os.path.dirname(__file__)),
            "storage", "data", "settings.json"
        )
        self._settings: Dict[str, Any] = self._load_settings()

    def _load_settings(self) -> Dict[str, Any]:
        """設定ファイルから設定を読み込み、デフォルト設定にマージする"""
        settings = dict(DEFAULT_SETTINGS)
        settings["recent_files"] = []

        if os.path.exists(self._settings_file):
            try:
                with open(self._settings_file, 'r', encoding='utf-8') as f:
                    loaded_settings = json.load(f)
                if isinstance(loaded_settings, dict):
                    settings.update(loaded_settings)
                else:
                    logger.warning(f"Ignoring settings file with non-object content: {self._settings_file}")
            except (json.JSONDecodeError, OSError) as e:
                logger.warning(f"Failed to read settings, using defaults: {e}")

        settings["indent"] = self._clamp_indent(settings.get("indent"))
        if settings.get("invalid_value_policy") not in [policy.value for policy in ValuePolicy]:
            logger.warning(f"Unknown invalid_value_policy {settings.get('invalid_value_policy')!r}, using 'reject'")
            settings["invalid_value_policy"] = ValuePolicy.REJECT.value
        root_name = settings.get("default_root_name")
        if not isinstance(root_name, str) or not root_name:
            logger.warning(f"Invalid default_root_name {root_name!r}, using {DEFAULT_SETTINGS['default_root_name']!r}")
            settings["default_root_name"] = DEFAULT_SETTINGS["default_root_name"]
        if not isinstance(settings.get("recent_files"), list):
            settings["recent_files"] = []
        return settings

    def save_settings(self, settings: Optional[Dict[str, Any]] = None) -> bool:
        """
        設定をファイルに保存

        書き込みに失敗した場合は例外を送出せず、ErrorHandlerへ報告する
        （無ければWARNINGログ）。

        Args:
            settings: 保存する設定（省略時は現在の設定）

        Returns:
            保存できた場合はTrue
        """
        try:
            os.makedirs(os.path.dirname(self._settings_file), exist_ok=True)
            with open(self._settings_file, 'w', encoding='utf-8') as f:
                json.dump(self._settings if settings is None else settings, f, indent=2, ensure_ascii=False)
        except OSError as e:
            error = AppError(
                f"Failed to save settings: {e}",
                severity=ErrorSeverity.WARNING,
                category=ErrorCategory.FILE_IO,
                original_exception=e,
                context={"settings_file": self._settings_file}
            )
            error_handler = self.app_state.get("error_handler")
            if error_handler:
                error_handler.handle_error(error)
            else:
                logger.warning(error.message)
            return False
        return True

    def _set(self, key: str, value: Any) -> bool:
        """保存に成功した場合だけ設定を変更してSETTINGS_CHANGEDを発行する"""
        updated = dict(self._settings)
        updated[key] = value
        if not self.save_settings(updated):
            return False
        self._settings = updated
        self.publish_event(EventType.SETTINGS_CHANGED, {"key": key, "value": value})
        return True

    @staticmethod
    def _clamp_indent(value: Any) -> int:
        """インデント幅を0〜10に収める"""
        try:
            indent = int(value)
        except (TypeError, ValueError):
            logger.warning(f"Invalid indent {value!r}, using {DEFAULT_SETTINGS['indent']}")
            return DEFAULT_SETTINGS["indent"]
        if indent < MIN_INDENT or indent > MAX_INDENT:
            clamped = min(max(indent, MIN_INDENT), MAX_INDENT)
            logger.warning(f"Indent {indent} out of range, clamped to {clamped}")
            return clamped
        return indent

    def get_setting(self, key: str, default: Any = None) -> Any:
        """設定値を取得"""
        return self._settings.get(key, default)

    def get_indent(self) -> int:
        """エクスポート時のインデント幅を取得"""
        return self._settings["indent"]

    def set_indent(self, indent: Any) -> bool:
        """エクスポート時のインデント幅を設定（範囲外は丸める）"""
        return self._set("indent", self._clamp_indent(indent))

    def get_default_root_name(self) -> str:
        """新規ツリーのルートカテゴリ名を取得"""
        return self._settings["default_root_name"]

    def set_default_root_name(self, name: str) -> bool:
        """新規ツリーのルートカテゴリ名を設定（空文字は不可）"""
        if not isinstance(name, str) or not name:
            raise ValueError(f"Invalid default root name: {name!r}")
        return self._set("default_root_name", name)

    def get_value_policy(self) -> ValuePolicy:
        """文字列・オブジェクト以外の値の扱いを取得"""
        return ValuePolicy(self._settings["invalid_value_policy"])

    def set_value_policy(self, policy: str) -> bool:
        """
        文字列・オブジェクト以外の値の扱いを設定

        Args:
            policy: "reject", "skip", "coerce" のいずれか（ValuePolicyも可）
        """
        value = policy.value if isinstance(policy, ValuePolicy) else policy
        if value not in [p.value for p in ValuePolicy]:
            raise ValueError(f"Invalid value policy: {policy}")
        return self._set("invalid_value_policy", value)

    def add_recent_file(self, file_path: str) -> bool:
        """最近使用したファイルを先頭に追加（最大10件）"""
        recent_files = [path for path in self._settings.get("recent_files", []) if path != file_path]
        recent_files.insert(0, file_path)
        return self._set("recent_files", recent_files[:MAX_RECENT_FILES])

    def get_recent_files(self) -> list[str]:
        """最近使用したファイルのリストを取得"""
        return list(self._settings.get("recent_files", []))


def create_settings_manager(app_state: Dict[str, Any], settings_file: Optional[str] = None) -> SettingsManager:
    """SettingsManagerのインスタンスを作成する工場関数"""
    settings_manager = SettingsManager(app_state, settings_file)
    app_state["settings_manager"] = settings_manager
    return settings_manager

"""
export_manager.py
ツリーから1ファイル分のJSONを再構築するマネージャークラス

ツリーの形（全カテゴリ・全キー）は対象ファイルが値を持っているかどうかに関係なく
すべて再現される。値の無いキーはNoneになる。
"""
import json
from typing import Any, Dict, Optional

from logging_config import get_logger
from translation_model import TranslationNode
from .event_aware_manager import EventAwareManager

logger = get_logger(__name__)

DEFAULT_INDENT = 2


class ExportManager(EventAwareManager):
    """
    ファイル単位のJSONエクスポートを担当するマネージャークラス
    """

    def __init__(self, app_state: Dict[str, Any], event_hub=None):
        super().__init__(app_state, manager_name="export_manager", event_hub=event_hub)

    def get_json(self, tree: TranslationNode, file_name: str) -> Dict[str, Any]:
        """
        ツリーからファイルのJSONオブジェクトを組み立てる

        同じ名前のキーとカテゴリが同じ階層にある場合は、カテゴリが優先される。

        Args:
            tree: ルートカテゴリ
            file_name: 対象ファイル名

        Returns:
            ネストした辞書。値が無いキーはNone
        """
        json_data: Dict[str, Any] = {}
        for item in tree.items:
            json_data[item.key] = item.values.get(file_name)
        for child in tree.children:
            json_data[child.name] = self.get_json(child, file_name)
        return json_data

    def to_json_text(self, tree: TranslationNode, file_name: str, indent: Optional[int] = None) -> str:
        """
        ファイルのJSONテキストを生成する

        値の無いキーはテキストから省かれる（カテゴリは空でも残る）。

        Args:
            tree: ルートカテゴリ
            file_name: 対象ファイル名
            indent: インデント幅。Noneなら設定値、0なら1行で出力する

        Returns:
            JSONテキスト
        """
        if indent is None:
            indent = self._default_indent()
        data = self._drop_absent(self.get_json(tree, file_name))
        if indent == 0:
            return json.dumps(data, ensure_ascii=False, separators=(",", ":"))
        return json.dumps(data, ensure_ascii=False, indent=indent)

    def _default_indent(self) -> int:
        settings_manager = self.app_state.get("settings_manager")
        if settings_manager:
            return settings_manager.get_indent()
        return DEFAULT_INDENT

    def _drop_absent(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Noneの葉を取り除いたコピーを返す"""
        cleaned: Dict[str, Any] = {}
        for key, value in data.items():
            if isinstance(value, dict):
                cleaned[key] = self._drop_absent(value)
            elif value is not None:
                cleaned[key] = value
        return cleaned


def create_export_manager(app_state: Dict[str, Any]) -> ExportManager:
    """ExportManagerのインスタンスを作成する工場関数"""
    export_manager = ExportManager(app_state)
    app_state["export_manager"] = export_manager
    return export_manager

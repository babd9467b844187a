"""
merge_manager.py
翻訳ファイルのJSONを共有ツリーへマージするマネージャークラス

ファイルごとのJSONオブジェクトを再帰的に走査し、
カテゴリ名・キー名の完全一致でツリー上のノードと対応付ける。
初めて見た名前はその場で作成し、既存のキーはそのファイルの値だけを上書きする。
マッチングは名前だけで行うため、マージ順序によってツリーの形は変わらない。
"""
import json
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from error_handling import MalformedInputError
from event_hub import EventType
from logging_config import get_logger
from translation_model import (
    TranslationFile, TranslationNode,
    find_or_create_category, find_or_create_item, count_nodes, iter_items
)
from .event_aware_manager import EventAwareManager

logger = get_logger(__name__)

DEFAULT_ROOT_NAME = "Default"

# 検証済みの内容: 値は文字列か、同じ形のネストした辞書
NormalizedContent = Dict[str, Union[str, 'NormalizedContent']]


class ValuePolicy(Enum):
    """文字列・オブジェクト以外の値（数値、真偽値、null、配列）の扱い"""
    REJECT = "reject"   # MalformedInputErrorを送出する
    SKIP = "skip"       # 黙って無視する
    COERCE = "coerce"   # JSON表記の文字列に変換して取り込む


class MergeManager(EventAwareManager):
    """
    翻訳ファイルをツリーへマージするマネージャークラス

    マージはファイル単位で全か無かで行われる。内容全体を先に検証し、
    検証に失敗した場合はツリーに一切触れずにMalformedInputErrorを送出する。

    Attributes:
        app_state (Dict): アプリケーションの状態を保持する辞書
    """

    def __init__(self, app_state: Dict[str, Any], value_policy: Optional[ValuePolicy] = None, event_hub=None):
        """
        MergeManagerを初期化します

        Args:
            app_state: アプリケーション状態辞書
            value_policy: 不正な値の扱い。省略時は設定（無ければREJECT）に従う
            event_hub: イベントハブ（オプション）
        """
        super().__init__(app_state, manager_name="merge_manager", event_hub=event_hub)
        self._value_policy = value_policy

    @property
    def value_policy(self) -> ValuePolicy:
        """現在有効な不正値ポリシー"""
        if self._value_policy is not None:
            return self._value_policy
        settings_manager = self.app_state.get("settings_manager")
        if settings_manager:
            return settings_manager.get_value_policy()
        return ValuePolicy.REJECT

    def _default_root_name(self) -> str:
        settings_manager = self.app_state.get("settings_manager")
        if settings_manager:
            return settings_manager.get_default_root_name()
        return DEFAULT_ROOT_NAME

    def parse(
        self,
        tree: Optional[TranslationNode],
        file: TranslationFile,
        default_root_name: Optional[str] = None
    ) -> TranslationNode:
        """
        ファイルの内容をツリーにマージする

        Args:
            tree: 既存のツリー（ルートカテゴリ）。Noneの場合は新規作成する
            file: マージするファイル
            default_root_name: 新規作成するルートの名前（省略時は設定値 / "Default"）

        Returns:
            マージ後のツリーのルート

        Raises:
            MalformedInputError: 内容がオブジェクトでない、またはREJECTポリシーで
                文字列・オブジェクト以外の値を含む場合
        """
        if not isinstance(file.content, dict):
            raise MalformedInputError(
                f"Top-level JSON value of '{file.name}' must be an object, "
                f"got {type(file.content).__name__}",
                context={"file": file.name}
            )

        # 先に全体を検証してからツリーを変更する
        normalized = self._normalize(file.content, [], file.name)

        if tree is None:
            tree = TranslationNode(default_root_name or self._default_root_name())
            logger.debug(f"Created root category '{tree.name}'")

        self._merge(normalized, tree, file.name)

        item_count = sum(1 for item in iter_items(tree) if file.name in item.values)
        logger.info(f"Merged '{file.name}': {item_count} values, {count_nodes(tree)} categories in tree")
        self.publish_event(EventType.FILE_MERGED, {"file": file.name, "values": item_count})
        return tree

    def _normalize(self, content: Dict[str, Any], path: List[str], file_name: str) -> NormalizedContent:
        """
        内容を検証し、文字列とネストした辞書だけからなる形に正規化する

        Args:
            content: JSONオブジェクト
            path: 現在位置までのキーのパス（エラーメッセージ用）
            file_name: ファイル名（エラーメッセージ用）
        """
        normalized: NormalizedContent = {}
        for name, value in content.items():
            if isinstance(value, str):
                normalized[name] = value
            elif isinstance(value, dict):
                normalized[name] = self._normalize(value, path + [name], file_name)
            else:
                key_path = ".".join(path + [name])
                policy = self.value_policy
                if policy == ValuePolicy.REJECT:
                    raise MalformedInputError(
                        f"Unsupported value of type {type(value).__name__} at '{key_path}' in '{file_name}'",
                        context={"file": file_name, "key_path": key_path}
                    )
                if policy == ValuePolicy.COERCE:
                    normalized[name] = json.dumps(value, ensure_ascii=False)
                else:
                    logger.debug(f"Skipping {type(value).__name__} value at '{key_path}' in '{file_name}'")
        return normalized

    def _merge(self, content: NormalizedContent, node: TranslationNode, file_name: str) -> None:
        """検証済みの内容を再帰的にノードへ反映する"""
        for name, value in content.items():
            if isinstance(value, str):
                item = find_or_create_item(node, name)
                item.values[file_name] = value
            else:
                category = find_or_create_category(node, name)
                self._merge(value, category, file_name)


def create_merge_manager(app_state: Dict[str, Any], value_policy: Optional[ValuePolicy] = None) -> MergeManager:
    """MergeManagerのインスタンスを作成する工場関数"""
    merge_manager = MergeManager(app_state, value_policy)
    app_state["merge_manager"] = merge_manager
    return merge_manager

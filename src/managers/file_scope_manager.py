"""
file_scope_manager.py
ツリーの構造編集とファイル単位の操作を担当するマネージャークラス

キー・カテゴリの追加・削除・名前変更、値の更新、
特定ファイルの値をツリー全体から取り除く操作を提供する。
"""
from typing import Any, Dict, Iterable, Optional, Union

from event_hub import EventType
from logging_config import get_logger
from translation_model import TranslationItem, TranslationNode
from .event_aware_manager import EventAwareManager

logger = get_logger(__name__)


class FileScopeManager(EventAwareManager):
    """
    構造編集を担当するマネージャークラス

    削除はIDの一致で行い、指定されたキー・サブツリー以外には波及しない。
    名前変更は兄弟との重複を許し、自動で統合はしない。
    """

    def __init__(self, app_state: Dict[str, Any], event_hub=None):
        super().__init__(app_state, manager_name="file_scope_manager", event_hub=event_hub)

    def add_key(
        self,
        tree: TranslationNode,
        tracked_files: Iterable[str],
        target_node: Optional[TranslationNode] = None,
        key: str = ""
    ) -> TranslationItem:
        """
        キーを追加し、追跡中の全ファイルの値を空文字で初期化する

        Args:
            tree: ルートカテゴリ
            tracked_files: 追跡中のファイル名
            target_node: 追加先のカテゴリ（省略時はルート）
            key: キー名（省略時は空文字）

        Returns:
            追加されたキー
        """
        node = target_node if target_node is not None else tree
        item = TranslationItem(key)
        for file_name in tracked_files:
            item.values[file_name] = ""
        node.items.append(item)

        logger.debug(f"Added key '{key}' to '{node.name}' for {len(item.values)} files")
        self.publish_event(EventType.KEY_ADDED, {"node_id": node.id, "item_id": item.id})
        return item

    def add_category(self, parent: TranslationNode, name: str = "") -> TranslationNode:
        """空のカテゴリを親の末尾に追加する（同名の兄弟があっても統合しない）"""
        category = TranslationNode(name)
        parent.children.append(category)

        logger.debug(f"Added category '{name}' under '{parent.name}'")
        self.publish_event(EventType.CATEGORY_ADDED, {"node_id": parent.id, "category_id": category.id})
        return category

    def remove_file(self, tree: TranslationNode, file_name: str) -> int:
        """
        全キーのvaluesからファイルの値を取り除く

        カテゴリやキー自体は削除しない。値が空になったキーも残す。

        Args:
            tree: ルートカテゴリ
            file_name: 取り除くファイル名

        Returns:
            取り除いた値の数（追跡されていないファイルなら0）
        """
        removed = self._remove_file(tree, file_name)
        logger.info(f"Removed {removed} values of '{file_name}' from tree")
        return removed

    def _remove_file(self, node: TranslationNode, file_name: str) -> int:
        removed = 0
        for item in node.items:
            if item.values.pop(file_name, None) is not None:
                removed += 1
        for child in node.children:
            removed += self._remove_file(child, file_name)
        return removed

    def remove_key(self, node: TranslationNode, item: TranslationItem) -> bool:
        """
        カテゴリからキーを削除する

        Returns:
            削除した場合はTrue、見つからなかった場合はFalse
        """
        for index, candidate in enumerate(node.items):
            if candidate.id == item.id:
                del node.items[index]
                logger.debug(f"Removed key '{item.key}' from '{node.name}'")
                self.publish_event(EventType.ENTITY_REMOVED, {"node_id": node.id, "item_id": item.id})
                return True
        return False

    def remove_category(self, parent: TranslationNode, node: TranslationNode) -> bool:
        """
        親からカテゴリをサブツリーごと削除する

        Returns:
            削除した場合はTrue、見つからなかった場合はFalse
        """
        for index, candidate in enumerate(parent.children):
            if candidate.id == node.id:
                del parent.children[index]
                logger.debug(f"Removed category '{node.name}' from '{parent.name}'")
                self.publish_event(EventType.ENTITY_REMOVED, {"node_id": parent.id, "category_id": node.id})
                return True
        return False

    def rename(
        self,
        entity: Union[TranslationNode, TranslationItem],
        new_name: str,
        parent: Optional[TranslationNode] = None
    ) -> bool:
        """
        カテゴリ名またはキー名をその場で変更する

        同名の兄弟がいても名前変更は行い、統合はしない。
        親が渡された場合は重複を検出し、警告を記録してFalseを返す。

        Args:
            entity: 対象のカテゴリまたはキー
            new_name: 新しい名前
            parent: 重複検出に使う親カテゴリ（オプション）

        Returns:
            重複が無ければTrue
        """
        if isinstance(entity, TranslationItem):
            old_name = entity.key
            entity.key = new_name
            siblings = parent.items if parent is not None else []
            duplicated = any(s.key == new_name and s.id != entity.id for s in siblings)
        else:
            old_name = entity.name
            entity.name = new_name
            siblings = parent.children if parent is not None else []
            duplicated = any(s.name == new_name and s.id != entity.id for s in siblings)

        if duplicated:
            logger.warning(f"Renamed '{old_name}' to '{new_name}', which duplicates a sibling in '{parent.name}'")
        self.publish_event(EventType.ENTITY_RENAMED, {"id": entity.id, "old": old_name, "new": new_name})
        return not duplicated

    def update_value(self, item: TranslationItem, file_name: str, value: str) -> None:
        """キーの1ファイル分の値を更新する"""
        item.values[file_name] = value
        self.publish_event(EventType.VALUE_UPDATED, {"item_id": item.id, "file": file_name})

    def prune_empty(self, node: TranslationNode) -> int:
        """
        値を1つも持たないキーと、空になったカテゴリを削除する

        remove_fileからは呼ばれない。渡されたノード自体は削除しない。

        Returns:
            削除したキーとカテゴリの合計数
        """
        removed = 0
        kept_items = [item for item in node.items if item.values]
        removed += len(node.items) - len(kept_items)
        node.items[:] = kept_items

        kept_children = []
        for child in node.children:
            removed += self.prune_empty(child)
            if child.items or child.children:
                kept_children.append(child)
            else:
                removed += 1
        node.children[:] = kept_children
        return removed


def create_file_scope_manager(app_state: Dict[str, Any]) -> FileScopeManager:
    """FileScopeManagerのインスタンスを作成する工場関数"""
    file_scope_manager = FileScopeManager(app_state)
    app_state["file_scope_manager"] = file_scope_manager
    return file_scope_manager

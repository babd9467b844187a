"""
translation_manager.py
追跡中の翻訳ファイルと共有ツリーを管理するマネージャークラス

app_state["translation_files"] に追跡中のファイル記述子を、
app_state["translation_tree"] にツリーのルート（ファイルが無い間はNone）を保持する。
ツリーを変更する操作はすべてこのマネージャーを通して1つずつ実行される。
"""
from typing import Any, Dict, Iterable, List, Optional

from error_handling import AppError, ErrorCategory, with_error_handling
from event_hub import EventType
from logging_config import get_logger, print_init
from translation_model import TranslationFile, TranslationItem, TranslationNode
from .event_aware_manager import EventAwareManager
from .export_manager import ExportManager, create_export_manager
from .file_io_manager import FileIOManager, create_file_io_manager
from .file_scope_manager import FileScopeManager, create_file_scope_manager
from .merge_manager import MergeManager, create_merge_manager

logger = get_logger(__name__)


class TranslationManager(EventAwareManager):
    """
    翻訳ファイル群とツリーの所有者となるマネージャークラス

    マージ・エクスポート・構造編集・入出力はapp_stateに登録された
    各マネージャーに委譲する（未登録なら初回利用時に作成する）。

    Attributes:
        app_state (Dict): アプリケーションの状態を保持する辞書
        ui_controls (Dict): UIコントロールを保持する辞書
        page (ft.Page): Fletページオブジェクト
    """

    def __init__(self, app_state: Dict[str, Any], ui_controls: Optional[Dict[str, Any]] = None, page=None, event_hub=None):
        super().__init__(app_state, ui_controls, page, "translation_manager", event_hub)
        self.app_state.setdefault("translation_files", [])
        self.app_state.setdefault("translation_tree", None)
        print_init("[OK] TranslationManager initialized")

    @property
    def merge_manager(self) -> MergeManager:
        return self.app_state.get("merge_manager") or create_merge_manager(self.app_state)

    @property
    def export_manager(self) -> ExportManager:
        return self.app_state.get("export_manager") or create_export_manager(self.app_state)

    @property
    def file_scope_manager(self) -> FileScopeManager:
        return self.app_state.get("file_scope_manager") or create_file_scope_manager(self.app_state)

    @property
    def file_io_manager(self) -> FileIOManager:
        return self.app_state.get("file_io_manager") or create_file_io_manager(self.app_state)

    @property
    def files(self) -> List[TranslationFile]:
        """追跡中のファイル記述子"""
        return self.app_state["translation_files"]

    def get_tree(self) -> Optional[TranslationNode]:
        """ツリーのルートを返す（ファイルが無ければNone）"""
        return self.app_state["translation_tree"]

    def tracked_file_names(self) -> List[str]:
        """追跡中のファイル名を追加順に返す"""
        return [file.name for file in self.files]

    def is_tracked(self, file_name: str) -> bool:
        return any(file.name == file_name for file in self.files)

    def add_file(self, file: TranslationFile) -> bool:
        """
        ファイルをツリーにマージして追跡対象に加える

        同名のファイルが既に追跡中なら何もしない。マージに失敗した場合は
        ファイル一覧もツリーも変更されずに例外が送出される。

        Args:
            file: 追加するファイル

        Returns:
            追加した場合はTrue、既に追跡中の場合はFalse

        Raises:
            MalformedInputError: 内容が翻訳ファイルの文法に従わない場合
        """
        if self.is_tracked(file.name):
            logger.info(f"File '{file.name}' is already tracked, skipping")
            return False

        tree = self.merge_manager.parse(self.get_tree(), file)
        self.app_state["translation_tree"] = tree
        self.files.append(file)

        self.publish_event(EventType.FILE_ADDED, {"file": file.name})
        return True

    def open_files(self, file_paths: Iterable[str]) -> List[str]:
        """
        パスからファイルを読み込み、1つずつ追加する

        読み込みやマージに失敗したファイルはエラーとして報告し、残りのファイルの
        処理を続ける。

        Args:
            file_paths: 読み込むファイルのパス

        Returns:
            追加されたファイル名のリスト（読み込み完了順）
        """
        added: List[str] = []
        for result in self.file_io_manager.read_files(file_paths):
            if isinstance(result, AppError):
                self._report_error(result)
                continue
            try:
                if self.add_file(result):
                    added.append(result.name)
                    self._remember_recent(result)
            except AppError as e:
                self._report_error(e)
        return added

    def _remember_recent(self, file: TranslationFile) -> None:
        settings_manager = self.app_state.get("settings_manager")
        if settings_manager and file.path:
            settings_manager.add_recent_file(file.path)

    def _report_error(self, error: AppError) -> None:
        """ErrorHandlerがあればそちらへ、無ければログへエラーを報告する"""
        error_handler = self.app_state.get("error_handler")
        if error_handler:
            error_handler.handle_error(error)
        else:
            logger.error(str(error))

    def remove_file(self, file_name: str) -> bool:
        """
        ファイルを追跡対象から外す

        複数のファイルを追跡中ならそのファイルの値だけをツリーから取り除く。
        最後の1ファイルだった場合はツリーそのものを破棄する。

        Args:
            file_name: 外すファイル名

        Returns:
            外した場合はTrue、追跡していないファイルの場合はFalse
        """
        if not self.is_tracked(file_name):
            return False

        if len(self.files) > 1:
            self.file_scope_manager.remove_file(self.get_tree(), file_name)
            self.app_state["translation_files"] = [f for f in self.files if f.name != file_name]
            self.publish_event(EventType.FILE_REMOVED, {"file": file_name})
        else:
            self.app_state["translation_tree"] = None
            self.app_state["translation_files"] = []
            logger.info(f"Last file '{file_name}' removed, tree discarded")
            self.publish_event(EventType.FILE_REMOVED, {"file": file_name})
            self.publish_event(EventType.TREE_CLEARED)
        return True

    def add_key(self, node: Optional[TranslationNode] = None, key: str = "") -> TranslationItem:
        """
        追跡中の全ファイルに空の値を持つキーを追加する

        Args:
            node: 追加先のカテゴリ（省略時はルート）
            key: キー名

        Raises:
            AppError: まだファイルが1つも無くツリーが存在しない場合
        """
        tree = self.get_tree()
        if tree is None:
            raise AppError("No translation file is loaded", category=ErrorCategory.VALIDATION)
        return self.file_scope_manager.add_key(tree, self.tracked_file_names(), node, key)

    @with_error_handling(category=ErrorCategory.FILE_IO)
    def export_file(self, file_name: str, file_path: Optional[str] = None, indent: Optional[int] = None) -> str:
        """
        ファイルのJSONテキストを生成し、パスが指定されていれば書き込む

        Args:
            file_name: エクスポートするファイル名
            file_path: 保存先（省略時は書き込まない）
            indent: インデント幅（省略時は設定値）

        Returns:
            生成したJSONテキスト
        """
        tree = self.get_tree()
        if tree is None:
            raise AppError("No translation file is loaded", category=ErrorCategory.VALIDATION)

        text = self.export_manager.to_json_text(tree, file_name, indent)
        if file_path and self.file_io_manager.write_file(file_path, text):
            self.publish_event(EventType.FILE_EXPORTED, {"file": file_name, "path": file_path})
        return text


def create_translation_manager(app_state: Dict[str, Any], ui_controls: Optional[Dict[str, Any]] = None, page=None) -> TranslationManager:
    """TranslationManagerのインスタンスを作成する工場関数"""
    translation_manager = TranslationManager(app_state, ui_controls, page)
    app_state["translation_manager"] = translation_manager
    return translation_manager

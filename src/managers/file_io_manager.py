"""
file_io_manager.py
翻訳ファイルの読み込み・書き込みを担当するマネージャークラス

読み込みは複数ファイルを並列に行えるが、結果のツリーへのマージは
呼び出し側が1ファイルずつ直列に行う。
"""
import json
import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Dict, Iterable, List, Optional, Union

from error_handling import AppError, ErrorCategory, MalformedInputError
from logging_config import get_logger
from translation_model import TranslationFile
from .event_aware_manager import EventAwareManager

logger = get_logger(__name__)

MAX_READ_WORKERS = 4


class FileIOManager(EventAwareManager):
    """
    翻訳ファイルの入出力を担当するマネージャークラス
    """

    def __init__(self, app_state: Dict[str, Any], event_hub=None):
        super().__init__(app_state, manager_name="file_io_manager", event_hub=event_hub)

    def read_file(self, file_path: str) -> TranslationFile:
        """
        JSONファイルを読み込んで記述子を返す

        Args:
            file_path: 読み込むファイルのパス

        Returns:
            名前がファイル名（basename）のTranslationFile

        Raises:
            MalformedInputError: JSONとして解析できない場合
            AppError: ファイルを読めない場合（カテゴリFILE_IO）
        """
        name = os.path.basename(file_path)
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                text = f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise AppError(
                f"Cannot read '{name}': {e}",
                category=ErrorCategory.FILE_IO,
                original_exception=e,
                context={"file_path": file_path}
            ) from e

        try:
            content = json.loads(text)
        except json.JSONDecodeError as e:
            raise MalformedInputError(
                f"Invalid JSON in '{name}' at line {e.lineno}, column {e.colno}: {e.msg}",
                original_exception=e,
                context={"file_path": file_path, "line": e.lineno, "column": e.colno}
            ) from e

        logger.debug(f"Read translation file: {file_path}")
        return TranslationFile(name, content, path=file_path)

    def read_files(self, file_paths: Iterable[str]) -> List[Union[TranslationFile, AppError]]:
        """
        複数ファイルを並列に読み込む

        結果は読み込みが完了した順に並ぶ。失敗したファイルは例外の代わりに
        そのAppErrorが結果に入る。

        Args:
            file_paths: 読み込むファイルのパス

        Returns:
            TranslationFileまたはAppErrorのリスト
        """
        paths = list(file_paths)
        results: List[Union[TranslationFile, AppError]] = []
        if not paths:
            return results

        with ThreadPoolExecutor(max_workers=min(MAX_READ_WORKERS, len(paths))) as executor:
            futures = [executor.submit(self.read_file, path) for path in paths]
            for future in as_completed(futures):
                try:
                    results.append(future.result())
                except AppError as e:
                    results.append(e)
        return results

    def write_file(self, file_path: Optional[str], text: str) -> bool:
        """
        テキストをUTF-8でファイルに書き込む

        Args:
            file_path: 保存先。Noneまたは空文字は保存ダイアログのキャンセルとして扱う
            text: 書き込むJSONテキスト

        Returns:
            書き込んだ場合はTrue、キャンセルの場合はFalse

        Raises:
            AppError: 書き込みに失敗した場合（カテゴリFILE_IO）
        """
        if not file_path:
            logger.debug("Save cancelled")
            return False

        try:
            directory = os.path.dirname(file_path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(file_path, 'w', encoding='utf-8') as f:
                f.write(text)
        except OSError as e:
            raise AppError(
                f"Cannot write '{os.path.basename(file_path)}': {e}",
                category=ErrorCategory.FILE_IO,
                original_exception=e,
                context={"file_path": file_path}
            ) from e

        logger.info(f"Saved translation file: {file_path}")
        return True


def create_file_io_manager(app_state: Dict[str, Any]) -> FileIOManager:
    """FileIOManagerのインスタンスを作成する工場関数"""
    file_io_manager = FileIOManager(app_state)
    app_state["file_io_manager"] = file_io_manager
    return file_io_manager

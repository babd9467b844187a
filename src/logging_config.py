"""
logging_config.py
ロギング設定モジュール

TransJSON全体で使用するロギング設定を管理します。
環境変数DEBUG_MODEの値からデバッグレベルを決定し、
コンソール出力のログレベルとファイル出力の有無を切り替えます。

- None/"0"/"false": 本番モード（WARNING以上のみ表示）
- "1"/"true": 開発モード（INFO以上を表示、ログファイル出力あり）
- "2"/"verbose": 詳細モード（DEBUGまで表示、ログファイル出力あり）
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Optional


def _read_debug_mode() -> int:
    """環境変数DEBUG_MODEを数値レベルに正規化する"""
    value = os.environ.get("DEBUG_MODE", "0").lower()
    if value in ["true", "1", "yes", "on"]:
        return 1
    if value in ["verbose", "2", "debug"]:
        return 2
    return 0


class TransJSONLogger:
    """TransJSON用のロガー設定クラス（シングルトン）"""

    _instance: Optional['TransJSONLogger'] = None
    _loggers: dict = {}

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self._initialized = True
        self.debug_mode = _read_debug_mode()
        self._console_handler: Optional[logging.Handler] = None
        self._setup_logging()

    def _setup_logging(self):
        """ロギングの初期設定"""
        # アプリケーション用のロガーにのみハンドラーを付ける（ルートロガーは汚さない）
        app_logger = logging.getLogger("transjson")
        app_logger.setLevel(logging.DEBUG)
        app_logger.handlers.clear()
        app_logger.propagate = True

        simple_formatter = logging.Formatter('%(levelname)s - %(name)s - %(message)s')
        detailed_formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        # コンソールハンドラー
        self._console_handler = logging.StreamHandler(sys.stdout)
        self._console_handler.setLevel(self._get_console_log_level())
        self._console_handler.setFormatter(simple_formatter)
        app_logger.addHandler(self._console_handler)

        # ファイルハンドラー（デバッグモード時のみ）
        if self.debug_mode >= 1:
            log_dir = Path(__file__).parent.parent / "logs"
            log_dir.mkdir(exist_ok=True)
            file_handler = logging.handlers.RotatingFileHandler(
                log_dir / "transjson.log",
                maxBytes=10*1024*1024,  # 10MB
                backupCount=5,
                encoding='utf-8'
            )
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(detailed_formatter)
            app_logger.addHandler(file_handler)

    def _get_console_log_level(self) -> int:
        """コンソール出力のログレベルを決定"""
        if self.debug_mode == 0:  # 本番モード
            return logging.WARNING
        elif self.debug_mode == 1:  # 通常デバッグ
            return logging.INFO
        else:  # 詳細デバッグ
            return logging.DEBUG

    def get_logger(self, name: str) -> logging.Logger:
        """モジュール用のロガーを取得（transjson配下にぶら下げる）"""
        if not name.startswith("transjson"):
            name = f"transjson.{name}"
        if name not in self._loggers:
            self._loggers[name] = logging.getLogger(name)
        return self._loggers[name]


# シングルトンインスタンス
_logger_config = TransJSONLogger()


def get_logger(name: str) -> logging.Logger:
    """
    モジュール用のロガーを取得

    Args:
        name: モジュール名（通常は__name__を使用）

    Returns:
        設定済みのロガーインスタンス
    """
    return _logger_config.get_logger(name)


def is_debug_mode() -> bool:
    """デバッグモードが有効かどうか（DEBUG_MODE>=1）"""
    return _logger_config.debug_mode >= 1


def print_init(message: str):
    """
    初期化メッセージの条件付き出力

    Args:
        message: 出力するメッセージ
    """
    if is_debug_mode():
        print(message)

"""
error_handling.py
エラー処理モジュール

TransJSONのエラー分類と処理を提供します。
エラーのログ記録、イベント通知、ユーザーへの表示を統合的に扱います。
"""
import logging
import functools
import traceback
import time
import json
from enum import Enum, auto
from typing import Dict, Any, Optional, List, Union
import flet as ft
from flet import Colors, Text

from logging_config import get_logger, print_init


class ErrorSeverity(Enum):
    """エラーの重大度を表す列挙型"""
    DEBUG = auto()      # 開発者向けデバッグ情報
    INFO = auto()       # 情報提供的なエラー
    WARNING = auto()    # 警告（操作は継続可能）
    ERROR = auto()      # エラー（操作は中断されるが、アプリは継続可能）
    CRITICAL = auto()   # 致命的なエラー（アプリケーション全体に影響）


class ErrorCategory(Enum):
    """エラーのカテゴリを表す列挙型"""
    FILE_IO = auto()          # ファイル読み込み・書き込み関連
    DATA_PROCESSING = auto()  # JSONの解析・マージ関連
    VALIDATION = auto()       # 設定値などのバリデーション関連
    UI = auto()               # UI関連
    OTHER = auto()            # その他


class AppError(Exception):
    """アプリケーション固有のエラークラス

    基本的な例外情報に加えて、エラーの重大度、カテゴリ、
    発生箇所のコンテキスト情報を保持します。
    """

    def __init__(
        self,
        message: str,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        category: ErrorCategory = ErrorCategory.OTHER,
        original_exception: Optional[Exception] = None,
        context: Dict[str, Any] = None
    ):
        """AppErrorを初期化します。

        Args:
            message (str): エラーメッセージ
            severity (ErrorSeverity, optional): エラーの重大度
            category (ErrorCategory, optional): エラーのカテゴリ
            original_exception (Exception, optional): 元の例外
            context (Dict[str, Any], optional): 追加のコンテキスト情報
        """
        super().__init__(message)
        self.message = message
        self.severity = severity
        self.category = category
        self.original_exception = original_exception
        self.context = context or {}
        self.timestamp = time.time()
        self.traceback = traceback.format_exc() if original_exception else None

    def __str__(self) -> str:
        """エラーの文字列表現を返します。"""
        return f"{self.severity.name} [{self.category.name}]: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """エラー情報を辞書として返します。"""
        return {
            "message": self.message,
            "severity": self.severity.name,
            "category": self.category.name,
            "original_exception": str(self.original_exception) if self.original_exception else None,
            "context": self.context,
            "timestamp": self.timestamp,
            "traceback": self.traceback
        }

    @classmethod
    def from_exception(
        cls,
        exception: Exception,
        category: ErrorCategory = ErrorCategory.OTHER,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: Dict[str, Any] = None
    ) -> 'AppError':
        """通常の例外からAppErrorを作成します。

        例外の型からカテゴリを推測します（JSON・型エラーはDATA_PROCESSING、
        OSError系はFILE_IO）。

        Args:
            exception (Exception): 元の例外
            category (ErrorCategory, optional): エラーのカテゴリ
            severity (ErrorSeverity, optional): エラーの重大度
            context (Dict[str, Any], optional): 追加のコンテキスト情報

        Returns:
            AppError: 作成されたAppErrorインスタンス
        """
        if isinstance(exception, (json.JSONDecodeError, TypeError, ValueError)):
            category = ErrorCategory.DATA_PROCESSING
        elif isinstance(exception, OSError):
            category = ErrorCategory.FILE_IO

        return cls(
            message=str(exception),
            severity=severity,
            category=category,
            original_exception=exception,
            context=context
        )


class MalformedInputError(AppError):
    """翻訳ファイルの内容が「文字列とネストしたオブジェクト」の文法に従わない場合のエラー

    JSONとして解析できない場合と、値が文字列・オブジェクト以外の場合の両方で送出されます。
    """

    def __init__(
        self,
        message: str,
        original_exception: Optional[Exception] = None,
        context: Dict[str, Any] = None
    ):
        super().__init__(
            message,
            severity=ErrorSeverity.ERROR,
            category=ErrorCategory.DATA_PROCESSING,
            original_exception=original_exception,
            context=context
        )


class ErrorHandler:
    """エラー処理を一元管理するクラス

    例外をAppErrorに正規化し、履歴とカテゴリ別件数を記録したうえで、
    ログ出力・APP_ERRORイベント発行・SnackBar表示を行います。
    """

    def __init__(self, app_state: Dict[str, Any], ui_controls: Dict[str, Any], page: Optional[ft.Page] = None):
        """ErrorHandlerを初期化します。

        Args:
            app_state (Dict[str, Any]): アプリケーションの状態
            ui_controls (Dict[str, Any]): UIコントロール
            page (ft.Page, optional): Fletページオブジェクト
        """
        self.app_state = app_state
        self.ui_controls = ui_controls
        self.page = page or app_state.get("page")
        self.logger = get_logger("error_handler")

        self.error_history: List[AppError] = []
        self.max_history_size = 100
        self.error_counts: Dict[ErrorCategory, int] = {category: 0 for category in ErrorCategory}

        print_init("[OK] ErrorHandler initialized.")

    @property
    def event_hub(self):
        """EventHubへの参照を取得します。"""
        return self.app_state.get("event_hub")

    def handle_error(
        self,
        error: Union[Exception, AppError],
        show_ui: bool = True,
        context: Dict[str, Any] = None,
        category: Optional[ErrorCategory] = None,
        severity: Optional[ErrorSeverity] = None
    ) -> AppError:
        """エラーを処理します。

        Args:
            error (Union[Exception, AppError]): 処理するエラー
            show_ui (bool): UIにエラーを表示するかどうか
            context (Dict[str, Any], optional): 追加のコンテキスト情報
            category (ErrorCategory, optional): エラーのカテゴリ（通常の例外の場合）
            severity (ErrorSeverity, optional): エラーの重大度（通常の例外の場合）

        Returns:
            AppError: 処理されたAppErrorインスタンス
        """
        if not isinstance(error, AppError):
            app_error = AppError.from_exception(
                error,
                category=category or ErrorCategory.OTHER,
                severity=severity or ErrorSeverity.ERROR,
                context=context
            )
        else:
            app_error = error
            if context:
                app_error.context.update(context)

        self.error_counts[app_error.category] = self.error_counts.get(app_error.category, 0) + 1

        self.error_history.append(app_error)
        if len(self.error_history) > self.max_history_size:
            self.error_history.pop(0)

        self._log_error(app_error)
        self._publish_error_event(app_error)

        if show_ui:
            self._show_error_ui(app_error)

        return app_error

    def _log_error(self, error: AppError):
        """重大度に応じたレベルでエラーをログに記録します。"""
        log_level = {
            ErrorSeverity.DEBUG: logging.DEBUG,
            ErrorSeverity.INFO: logging.INFO,
            ErrorSeverity.WARNING: logging.WARNING,
            ErrorSeverity.ERROR: logging.ERROR,
            ErrorSeverity.CRITICAL: logging.CRITICAL,
        }.get(error.severity, logging.ERROR)

        self.logger.log(log_level, f"{error.category.name}: {error.message}")

        if error.traceback and log_level >= logging.ERROR:
            self.logger.debug(f"詳細:\n{error.traceback}")

        if error.context:
            context_str = json.dumps(error.context, ensure_ascii=False, default=str)
            self.logger.debug(f"コンテキスト: {context_str}")

    def _publish_error_event(self, error: AppError):
        """APP_ERRORイベントを発行します。"""
        if not self.event_hub:
            return

        from event_hub import EventType, EventPriority

        priority_map = {
            ErrorSeverity.DEBUG: EventPriority.LOW,
            ErrorSeverity.INFO: EventPriority.LOW,
            ErrorSeverity.WARNING: EventPriority.NORMAL,
            ErrorSeverity.ERROR: EventPriority.HIGH,
            ErrorSeverity.CRITICAL: EventPriority.HIGHEST,
        }
        self.event_hub.publish(
            EventType.APP_ERROR,
            data=error.to_dict(),
            source="error_handler",
            priority=priority_map.get(error.severity, EventPriority.NORMAL)
        )

    def _show_error_ui(self, error: AppError):
        """ページが接続されていればSnackBarでエラーを表示します。"""
        if not self.page:
            return

        color_map = {
            ErrorSeverity.DEBUG: Colors.BLUE,
            ErrorSeverity.INFO: Colors.BLUE_GREY,
            ErrorSeverity.WARNING: Colors.ORANGE,
            ErrorSeverity.ERROR: Colors.RED,
            ErrorSeverity.CRITICAL: Colors.RED_900,
        }
        self.page.snack_bar = ft.SnackBar(
            content=Text(error.message),
            action="OK",
            bgcolor=color_map.get(error.severity, Colors.RED),
            open=True
        )
        self.page.update()


def with_error_handling(
    category: ErrorCategory = ErrorCategory.OTHER,
    severity: ErrorSeverity = ErrorSeverity.ERROR,
    show_ui: bool = True
):
    """マネージャーメソッドの例外をErrorHandlerへ通知するデコレータ

    self.app_stateに"error_handler"が無い場合は素通しします。
    通知後、例外は呼び出し元へ再送出されます。

    Args:
        category (ErrorCategory, optional): エラーのカテゴリ
        severity (ErrorSeverity, optional): エラーの重大度
        show_ui (bool, optional): UIにエラーを表示するかどうか

    Returns:
        Callable: デコレータ関数
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            self_arg = args[0] if args else None
            app_state = getattr(self_arg, 'app_state', None) if self_arg else None

            if not app_state or 'error_handler' not in app_state:
                return func(*args, **kwargs)

            error_handler = app_state['error_handler']
            try:
                return func(*args, **kwargs)
            except AppError as e:
                error_handler.handle_error(e, show_ui=show_ui, context={"function": func.__name__})
                raise
            except Exception as e:
                app_error = AppError(
                    message=str(e),
                    severity=severity,
                    category=category,
                    original_exception=e,
                    context={
                        "function": func.__name__,
                        "args": [str(arg) for arg in args[1:]],
                        "kwargs": {k: str(v) for k, v in kwargs.items()}
                    }
                )
                error_handler.handle_error(app_error, show_ui=show_ui)
                raise

        return wrapper
    return decorator


def create_error_handler(app_state: Dict[str, Any], ui_controls: Dict[str, Any], page: Optional[ft.Page] = None) -> ErrorHandler:
    """ErrorHandlerのインスタンスを作成する工場関数"""
    error_handler = ErrorHandler(app_state, ui_controls, page)
    app_state["error_handler"] = error_handler
    return error_handler

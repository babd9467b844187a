"""
transjson_app.py
TransJSONのメインアプリケーションクラス

各マネージャーを初期化して接続し、翻訳ツリーを一覧表示する薄いFlet UIを構築する。
ツリーの操作はすべてTranslationManager / FileScopeManagerに委譲する。
"""
import flet as ft
import os
from flet import (
    Column, ElevatedButton, FilePicker, FilePickerResultEvent, IconButton, Icons,
    ListView, Row, Text, TextField, ThemeMode, Theme
)
from typing import Any, Dict, Optional

from error_handling import AppError, create_error_handler
from event_hub import Event, EventType, create_event_hub
from logging_config import get_logger, print_init
from managers import (
    ValuePolicy,
    create_export_manager, create_file_io_manager, create_file_scope_manager,
    create_merge_manager, create_settings_manager, create_translation_manager
)
from managers.settings_manager import MAX_INDENT, MIN_INDENT
from translation_model import TranslationItem, TranslationNode

logger = get_logger(__name__)

INDENT_WIDTH = 24


class TransJSONApp:
    """
    TransJSONのメインアプリケーションクラス

    Attributes:
        page (ft.Page): Fletページオブジェクト
        app_state (Dict): アプリケーションの状態を保持する辞書
        ui_controls (Dict): UIコントロールを保持する辞書
        file_picker (FilePicker): ファイル選択ダイアログ
        save_file_picker (FilePicker): ファイル保存ダイアログ
    """

    def __init__(self, page: ft.Page):
        self.page = page
        self.app_state: Dict[str, Any] = {"page": page}
        self.ui_controls: Dict[str, Any] = {}
        self.file_picker: Optional[FilePicker] = None
        self.save_file_picker: Optional[FilePicker] = None
        # 保存ダイアログを開いた対象のファイル名
        self._pending_save: Optional[str] = None

        self.setup_page()
        self.initialize_managers()
        self.setup_file_pickers()
        self.initialize_ui_controls()

        print_init("[OK] TransJSONApp initialized.")

    def setup_page(self):
        """ページの基本設定を行う"""
        self.page.title = "TransJSON"
        self.page.theme_mode = ThemeMode.SYSTEM
        self.page.theme = Theme(color_scheme_seed="indigo")
        self.page.padding = 10

    def initialize_managers(self):
        """各種マネージャーを初期化する"""
        event_hub = create_event_hub()
        self.app_state["event_hub"] = event_hub
        create_error_handler(self.app_state, self.ui_controls, self.page)
        create_settings_manager(self.app_state)
        create_merge_manager(self.app_state)
        create_export_manager(self.app_state)
        create_file_scope_manager(self.app_state)
        create_file_io_manager(self.app_state)
        self.translation_manager = create_translation_manager(self.app_state, self.ui_controls, self.page)

        # ツリーが変わるイベントではビューを作り直す
        for event_type in (EventType.FILE_ADDED, EventType.FILE_REMOVED, EventType.TREE_CLEARED,
                           EventType.KEY_ADDED, EventType.CATEGORY_ADDED, EventType.ENTITY_REMOVED):
            event_hub.subscribe(event_type, self.on_tree_changed)

    def setup_file_pickers(self):
        """ファイルピッカーを設定"""
        self.file_picker = FilePicker(on_result=self.on_files_selected)
        self.save_file_picker = FilePicker(on_result=self.on_save_file_result)
        self.page.overlay.extend([self.file_picker, self.save_file_picker])

    def initialize_ui_controls(self):
        """UI基本コントロールの作成"""
        self.ui_controls["file_bar"] = Row(wrap=True, spacing=10)
        self.ui_controls["tree_view"] = ListView(expand=True, spacing=4)
        self.ui_controls["open_button"] = ElevatedButton(
            "Open",
            icon=Icons.UPLOAD_FILE,
            on_click=lambda _: self.file_picker.pick_files(
                dialog_title="Open translation files",
                allow_multiple=True,
                allowed_extensions=["json"]
            )
        )
        self.ui_controls["settings_button"] = IconButton(
            icon=Icons.SETTINGS,
            tooltip="Settings",
            on_click=lambda _: self.show_settings_dialog()
        )

    def build_ui(self):
        """UIの構築"""
        self.page.add(
            Column(
                [
                    Row([self.ui_controls["open_button"], self.ui_controls["settings_button"],
                         self.ui_controls["file_bar"]], spacing=10),
                    self.ui_controls["tree_view"],
                ],
                expand=True,
            )
        )
        self.refresh()

    def on_files_selected(self, e: FilePickerResultEvent):
        """ファイル選択ダイアログの結果処理"""
        if not e.files:
            return
        added = self.translation_manager.open_files([f.path for f in e.files if f.path])
        logger.info(f"Opened {len(added)} of {len(e.files)} selected files")

    def trigger_save_dialog(self, file_name: str):
        """ファイルの保存ダイアログを表示"""
        self._pending_save = file_name
        self.save_file_picker.save_file(
            dialog_title=f"Save {file_name}",
            file_name=file_name,
            allowed_extensions=["json"]
        )

    def on_save_file_result(self, e: FilePickerResultEvent):
        """ファイル保存ダイアログの結果処理（キャンセル時は何もしない）"""
        file_name, self._pending_save = self._pending_save, None
        if not e.path or not file_name:
            return
        try:
            self.translation_manager.export_file(file_name, e.path)
        except AppError:
            # ErrorHandlerがSnackBarで表示済み
            return
        self.page.snack_bar = ft.SnackBar(content=Text(f"Saved {os.path.basename(e.path)}"), open=True)
        self.page.update()

    def show_settings_dialog(self):
        """エクスポートのインデント、ルート名、値の扱いを変更するダイアログを表示する"""
        if self.app_state.get("settings_dialog_showing", False):
            return
        self.app_state["settings_dialog_showing"] = True
        settings_manager = self.app_state["settings_manager"]

        indent_slider = ft.Slider(
            min=MIN_INDENT, max=MAX_INDENT, divisions=MAX_INDENT - MIN_INDENT,
            value=settings_manager.get_indent(), label="{value}"
        )
        root_name_field = TextField(label="Root category name", value=settings_manager.get_default_root_name())
        policy_dropdown = ft.Dropdown(
            label="Non-string values",
            value=settings_manager.get_value_policy().value,
            options=[ft.dropdown.Option(policy.value) for policy in ValuePolicy],
        )

        def close():
            self.app_state["settings_dialog_showing"] = False
            if overlay_container in self.page.overlay:
                self.page.overlay.remove(overlay_container)
            self.page.update()

        def handle_save(e):
            root_name = (root_name_field.value or "").strip()
            if not root_name:
                root_name_field.error_text = "Required"
                self.page.update()
                return
            settings_manager.set_indent(int(indent_slider.value))
            settings_manager.set_default_root_name(root_name)
            settings_manager.set_value_policy(policy_dropdown.value)
            close()

        dialog_content = ft.Container(
            content=Column([
                Text("Settings", size=20, weight=ft.FontWeight.BOLD),
                ft.Divider(),
                Text("Export indent"),
                indent_slider,
                root_name_field,
                policy_dropdown,
                Row([
                    ft.TextButton("Cancel", on_click=lambda _: close()),
                    ElevatedButton("Save", on_click=handle_save),
                ], alignment=ft.MainAxisAlignment.END),
            ], spacing=10, tight=True),
            padding=20,
            bgcolor=ft.Colors.SURFACE,
            border_radius=10,
            border=ft.border.all(1, ft.Colors.OUTLINE),
            width=400,
        )

        # 背景を暗くするためのオーバーレイ
        overlay_container = ft.Container(
            content=ft.Stack([
                ft.Container(bgcolor=ft.Colors.with_opacity(0.5, ft.Colors.BLACK), expand=True),
                ft.Container(content=dialog_content, alignment=ft.alignment.center, expand=True),
            ]),
            expand=True,
        )
        self.page.overlay.append(overlay_container)
        self.page.update()

    def on_tree_changed(self, event: Event):
        self.refresh()

    def refresh(self):
        """ファイルバーとツリービューを作り直す"""
        file_names = self.translation_manager.tracked_file_names()
        self.ui_controls["file_bar"].controls = [self._build_file_chip(name) for name in file_names]

        tree_view = self.ui_controls["tree_view"]
        tree_view.controls = []
        tree = self.translation_manager.get_tree()
        if tree is not None:
            self._build_node(tree, None, 0, file_names)
        self.page.update()

    def _build_file_chip(self, file_name: str):
        return Row(
            [
                Text(file_name, weight=ft.FontWeight.BOLD),
                IconButton(icon=Icons.SAVE, tooltip="Save", on_click=lambda _: self.trigger_save_dialog(file_name)),
                IconButton(icon=Icons.CLOSE, tooltip="Remove",
                           on_click=lambda _: self.translation_manager.remove_file(file_name)),
            ],
            spacing=0,
        )

    def _build_node(self, node: TranslationNode, parent: Optional[TranslationNode], depth: int, file_names):
        """カテゴリ1つ分の行と、その配下のキー・カテゴリを追加する"""
        scope = self.translation_manager.file_scope_manager
        controls = self.ui_controls["tree_view"].controls

        header = [
            TextField(
                value=node.name,
                dense=True,
                width=240,
                on_blur=lambda e: scope.rename(node, e.control.value, parent),
            ),
            IconButton(icon=Icons.ADD, tooltip="Add key",
                       on_click=lambda _: self.translation_manager.add_key(node)),
            IconButton(icon=Icons.CREATE_NEW_FOLDER, tooltip="Add category",
                       on_click=lambda _: scope.add_category(node)),
        ]
        if parent is not None:
            header.append(IconButton(icon=Icons.DELETE, tooltip="Remove category",
                                     on_click=lambda _: scope.remove_category(parent, node)))
        controls.append(Row([ft.Container(width=depth * INDENT_WIDTH)] + header))

        for item in node.items:
            controls.append(self._build_item_row(node, item, depth + 1, file_names))
        for child in node.children:
            self._build_node(child, node, depth + 1, file_names)

    def _build_item_row(self, node: TranslationNode, item: TranslationItem, depth: int, file_names):
        scope = self.translation_manager.file_scope_manager
        cells = [
            ft.Container(width=depth * INDENT_WIDTH),
            TextField(value=item.key, dense=True, width=200,
                      on_blur=lambda e: scope.rename(item, e.control.value, node)),
        ]
        for file_name in file_names:
            cells.append(TextField(
                value=item.values.get(file_name, ""),
                hint_text=file_name,
                dense=True,
                expand=True,
                on_change=lambda e, name=file_name: scope.update_value(item, name, e.control.value),
            ))
        cells.append(IconButton(icon=Icons.DELETE_OUTLINE, tooltip="Remove key",
                                on_click=lambda _: scope.remove_key(node, item)))
        return Row(cells)

    def run(self):
        """アプリケーションを実行する"""
        self.build_ui()
        logger.info("TransJSONApp running")


def main(page: ft.Page):
    """
    アプリケーションのエントリーポイント

    Args:
        page (ft.Page): Fletページオブジェクト
    """
    app = TransJSONApp(page)
    app.run()

"""
TransJSONのマネージャー

翻訳ツリーの各機能を担当するマネージャークラス
"""

# マネージャーのインポート
from .merge_manager import MergeManager, ValuePolicy, create_merge_manager
from .export_manager import ExportManager, create_export_manager
from .file_scope_manager import FileScopeManager, create_file_scope_manager
from .file_io_manager import FileIOManager, create_file_io_manager
from .settings_manager import SettingsManager, create_settings_manager
from .translation_manager import TranslationManager, create_translation_manager

__all__ = [
    'MergeManager', 'ValuePolicy', 'create_merge_manager',
    'ExportManager', 'create_export_manager',
    'FileScopeManager', 'create_file_scope_manager',
    'FileIOManager', 'create_file_io_manager',
    'SettingsManager', 'create_settings_manager',
    'TranslationManager', 'create_translation_manager',
]

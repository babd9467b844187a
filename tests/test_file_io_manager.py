"""
test_file_io_manager.py
FileIOManagerのテストモジュール
"""
import os

import pytest

from error_handling import AppError, ErrorCategory, MalformedInputError
from managers.file_io_manager import FileIOManager
from translation_model import TranslationFile


@pytest.fixture
def file_io(app_state):
    return FileIOManager(app_state)


def write_text(directory, name, text):
    path = os.path.join(str(directory), name)
    with open(path, 'w', encoding='utf-8') as f:
        f.write(text)
    return path


@pytest.mark.unit
class TestFileIOManager:
    """FileIOManagerの単体テスト"""

    def test_read_file_uses_basename(self, file_io, json_dir):
        path = write_text(json_dir, "ja.json", '{"hello": "こんにちは"}')
        file = file_io.read_file(path)
        assert file.name == "ja.json"
        assert file.path == path
        assert file.content == {"hello": "こんにちは"}

    def test_invalid_json_reports_position(self, file_io, json_dir):
        """解析エラーの行と列がコンテキストに入ることを確認"""
        path = write_text(json_dir, "broken.json", '{\n  "a": "1",\n  oops\n}')
        with pytest.raises(MalformedInputError) as exc_info:
            file_io.read_file(path)
        assert exc_info.value.context["line"] == 3
        assert exc_info.value.context["column"] == 3
        assert "broken.json" in exc_info.value.message

    def test_missing_file_is_file_io_error(self, file_io, json_dir):
        with pytest.raises(AppError) as exc_info:
            file_io.read_file(os.path.join(str(json_dir), "nope.json"))
        assert exc_info.value.category == ErrorCategory.FILE_IO
        assert not isinstance(exc_info.value, MalformedInputError)

    def test_read_files_collects_errors(self, file_io, json_dir):
        """失敗したファイルはAppErrorとして結果に含まれることを確認"""
        paths = [write_text(json_dir, f"{i}.json", f'{{"k": "{i}"}}') for i in range(6)]
        paths.append(write_text(json_dir, "bad.json", "{"))

        results = file_io.read_files(paths)
        files = [r for r in results if isinstance(r, TranslationFile)]
        errors = [r for r in results if isinstance(r, AppError)]

        assert sorted(f.name for f in files) == [f"{i}.json" for i in range(6)]
        assert len(errors) == 1 and isinstance(errors[0], MalformedInputError)

    def test_read_files_empty(self, file_io):
        assert file_io.read_files([]) == []

    def test_write_file_creates_directories(self, file_io, json_dir):
        path = os.path.join(str(json_dir), "a", "b", "out.json")
        assert file_io.write_file(path, '{"a":"1"}') is True
        with open(path, encoding='utf-8') as f:
            assert f.read() == '{"a":"1"}'

    @pytest.mark.parametrize("path", [None, ""])
    def test_write_file_cancelled(self, file_io, path):
        """保存先が無い場合はキャンセルとして何もしないことを確認"""
        assert file_io.write_file(path, "{}") is False

"""
test_merge_manager.py
MergeManagerのテストモジュール

ファイルの内容がツリーに名前ベースでマージされることをテストします。
"""
import copy

import pytest

from error_handling import ErrorCategory, MalformedInputError
from managers.merge_manager import MergeManager, ValuePolicy
from translation_model import TranslationFile, TranslationNode, tree_shape


@pytest.fixture
def merge_manager(app_state):
    return MergeManager(app_state)


@pytest.mark.unit
class TestMergeManager:
    """MergeManager.parseの単体テスト"""

    def test_parse_creates_root_and_items(self, merge_manager):
        """ツリーが無い場合はルートを作成してマージすることを確認"""
        file = TranslationFile("fileName", {"key1": "value1", "category1": {"key2": "value2"}})
        tree = merge_manager.parse(None, file)

        assert tree.name == "Default"
        assert tree.items[0].key == "key1"
        assert tree.items[0].values == {"fileName": "value1"}
        category = tree.children[0]
        assert category.name == "category1"
        assert category.items[0].key == "key2"
        assert category.items[0].values["fileName"] == "value2"

    def test_parse_uses_custom_root_name(self, merge_manager):
        """ルート名を指定できることを確認"""
        tree = merge_manager.parse(None, TranslationFile("a", {}), default_root_name="Root")
        assert tree.name == "Root"
        assert tree.items == []
        assert tree.children == []

    def test_parse_root_name_from_settings(self, app_state):
        """設定のルート名が使われることを確認"""
        class FakeSettings:
            def get_default_root_name(self):
                return "FromSettings"

            def get_value_policy(self):
                return ValuePolicy.REJECT

        app_state["settings_manager"] = FakeSettings()
        tree = MergeManager(app_state).parse(None, TranslationFile("a", {"k": "v"}))
        assert tree.name == "FromSettings"

    def test_parse_keeps_enumeration_order(self, merge_manager):
        """キーとカテゴリがファイルの列挙順に追加されることを確認"""
        file = TranslationFile("en", {"z": "1", "a": "2", "m": {"y": "3"}, "b": {"x": "4"}})
        tree = merge_manager.parse(None, file)
        assert [item.key for item in tree.items] == ["z", "a"]
        assert [child.name for child in tree.children] == ["m", "b"]

    def test_second_file_correlates_by_name(self, merge_manager, english_file, french_file):
        """2つ目のファイルが既存のキーに値を追加することを確認"""
        tree = merge_manager.parse(None, english_file)
        tree = merge_manager.parse(tree, french_file)

        title = tree.find_item("title")
        assert title.values == {"en.json": "Hello", "fr.json": "Bonjour"}

        menu = tree.find_category("menu")
        assert [item.key for item in menu.items] == ["open", "save", "close"]
        assert menu.find_item("open").values == {"en.json": "Open"}
        assert menu.find_item("close").values == {"fr.json": "Fermer"}
        assert len(tree.children) == 1

    def test_parse_returns_same_tree_instance(self, merge_manager, english_file, french_file):
        """既存ツリーにマージした場合は同じルートが返ることを確認"""
        tree = merge_manager.parse(None, english_file)
        root_id = tree.id
        assert merge_manager.parse(tree, french_file) is tree
        assert tree.id == root_id

    def test_idempotent_merge(self, merge_manager, english_file):
        """同じ内容を2回マージしても形が変わらないことを確認"""
        tree = merge_manager.parse(None, english_file)
        shape = tree_shape(tree)
        ids = [item.id for item in tree.items]

        merge_manager.parse(tree, english_file)
        assert tree_shape(tree) == shape
        assert [item.id for item in tree.items] == ids

    def test_order_independence(self, merge_manager, english_file, french_file):
        """マージ順序に関わらず同じ名前と構造になることを確認"""
        first = merge_manager.parse(merge_manager.parse(None, english_file), french_file)
        second = merge_manager.parse(merge_manager.parse(None, french_file), english_file)
        assert tree_shape(first, ordered=False) == tree_shape(second, ordered=False)

    def test_remerge_overwrites_but_keeps_missing_keys(self, merge_manager):
        """再マージは値を上書きし、消えたキーは残すことを確認"""
        tree = merge_manager.parse(None, TranslationFile("en", {"a": "1", "b": "2"}))
        merge_manager.parse(tree, TranslationFile("en", {"a": "changed"}))

        assert tree.find_item("a").values["en"] == "changed"
        assert tree.find_item("b").values["en"] == "2"

    def test_matching_is_case_sensitive(self, merge_manager):
        """大文字小文字が違うキーは別のキーになることを確認"""
        tree = merge_manager.parse(None, TranslationFile("en", {"Title": "A"}))
        merge_manager.parse(tree, TranslationFile("fr", {"title": "B"}))
        assert [item.key for item in tree.items] == ["Title", "title"]

    def test_deep_nesting(self, merge_manager):
        """深いネストが再現されることを確認"""
        content = {"a": {"b": {"c": {"d": {"e": "deep"}}}}}
        tree = merge_manager.parse(None, TranslationFile("en", content))
        node = tree
        for name in "abcd":
            node = node.find_category(name)
        assert node.find_item("e").values == {"en": "deep"}

    def test_content_is_not_modified(self, merge_manager, english_file):
        """マージが入力のJSONを変更しないことを確認"""
        before = copy.deepcopy(english_file.content)
        merge_manager.parse(None, english_file)
        assert english_file.content == before

    def test_publishes_file_merged(self, merge_manager, english_file, recorded_events):
        """マージ後にFILE_MERGEDイベントが発行されることを確認"""
        merge_manager.parse(None, english_file)
        assert recorded_events() == ["FILE_MERGED"]


@pytest.mark.unit
class TestValuePolicy:
    """文字列・オブジェクト以外の値の扱いのテスト"""

    content = {"title": "Hi", "count": 3, "menu": {"enabled": True, "label": "Menu", "nothing": None}}

    def test_reject_raises_with_key_path(self, app_state):
        """REJECTでは不正な値のキーパスを含むエラーになることを確認"""
        manager = MergeManager(app_state, ValuePolicy.REJECT)
        with pytest.raises(MalformedInputError) as exc_info:
            manager.parse(None, TranslationFile("en", {"menu": {"count": 3}}))
        assert exc_info.value.category == ErrorCategory.DATA_PROCESSING
        assert exc_info.value.context["key_path"] == "menu.count"
        assert exc_info.value.context["file"] == "en"

    def test_reject_is_default(self, app_state):
        """既定のポリシーがREJECTであることを確認"""
        assert MergeManager(app_state).value_policy == ValuePolicy.REJECT

    def test_reject_leaves_tree_untouched(self, app_state, english_file):
        """失敗したマージがツリーを一切変更しないことを確認"""
        manager = MergeManager(app_state, ValuePolicy.REJECT)
        tree = manager.parse(None, english_file)
        shape = tree_shape(tree)
        values = {item.key: dict(item.values) for item in tree.items}

        # 先頭のキーは正常だが、後ろに不正な値がある
        bad = TranslationFile("fr", {"title": "Bonjour", "new": {"x": "1"}, "broken": [1, 2]})
        with pytest.raises(MalformedInputError):
            manager.parse(tree, bad)

        assert tree_shape(tree) == shape
        assert {item.key: item.values for item in tree.items} == values

    def test_skip_ignores_values(self, app_state):
        """SKIPでは不正な値が無視されることを確認"""
        tree = MergeManager(app_state, ValuePolicy.SKIP).parse(None, TranslationFile("en", self.content))
        assert [item.key for item in tree.items] == ["title"]
        assert [item.key for item in tree.find_category("menu").items] == ["label"]

    def test_coerce_converts_to_json_text(self, app_state):
        """COERCEでは値がJSON表記の文字列になることを確認"""
        content = dict(self.content, list_value=[1, "two"])
        tree = MergeManager(app_state, ValuePolicy.COERCE).parse(None, TranslationFile("en", content))
        assert tree.find_item("count").values["en"] == "3"
        assert tree.find_item("list_value").values["en"] == '[1, "two"]'
        menu = tree.find_category("menu")
        assert menu.find_item("enabled").values["en"] == "true"
        assert menu.find_item("nothing").values["en"] == "null"

    @pytest.mark.parametrize("policy", list(ValuePolicy))
    @pytest.mark.parametrize("content", [[], "text", 42, None])
    def test_non_object_top_level_always_rejected(self, app_state, policy, content):
        """トップレベルがオブジェクトでない場合はポリシーに関係なくエラーになることを確認"""
        with pytest.raises(MalformedInputError):
            MergeManager(app_state, policy).parse(None, TranslationFile("en", content))

    def test_failed_first_parse_creates_no_tree(self, app_state):
        """最初のマージが失敗した場合は例外だけでツリーが返らないことを確認"""
        manager = MergeManager(app_state)
        tree = None
        with pytest.raises(MalformedInputError):
            tree = manager.parse(tree, TranslationFile("en", {"a": 1}))
        assert tree is None

    def test_existing_tree_passed_through_unchanged_on_error(self, app_state):
        """既存ツリーに渡した空ルートが失敗後も空であることを確認"""
        tree = TranslationNode("Default")
        with pytest.raises(MalformedInputError):
            MergeManager(app_state).parse(tree, TranslationFile("en", {"a": "x", "b": False}))
        assert tree.items == []

"""
translation_model.py
翻訳ツリーのデータモデル

複数の翻訳ファイル（言語ごとのJSON）を1つの階層テーブルとして扱うためのモデル。
カテゴリ（TranslationNode）はネストしたJSONオブジェクトに、
キー（TranslationItem）は文字列の葉に対応する。
各ノード・キーは生成時に一度だけ割り当てられるIDで識別される。
"""
import uuid
from typing import Any, Dict, Iterator, List, Optional


def generate_id() -> str:
    """新しいノード・キー用の一意なIDを生成する"""
    return str(uuid.uuid4())


class TranslationItem:
    """
    翻訳キー（ツリーの葉）

    Attributes:
        id (str): 不変の識別子
        key (str): キー名（変更可能）
        values (Dict[str, str]): ファイル名 -> 値。値を持つファイルの分だけ存在する（疎）
    """

    def __init__(self, key: str = "", id: Optional[str] = None, values: Optional[Dict[str, str]] = None):
        self.id = id or generate_id()
        self.key = key
        self.values: Dict[str, str] = values if values is not None else {}

    def __repr__(self) -> str:
        return f"TranslationItem(key={self.key!r}, values={self.values!r})"


class TranslationNode:
    """
    翻訳カテゴリ（ツリーの内部ノード）

    children と items はこのノードが排他的に所有する。
    同じノードがツリー内に二度現れることはない。

    Attributes:
        id (str): 不変の識別子
        name (str): 表示名（変更可能）
        children (List[TranslationNode]): 子カテゴリ（順序付き）
        items (List[TranslationItem]): キー（順序付き）
    """

    def __init__(
        self,
        name: str,
        id: Optional[str] = None,
        children: Optional[List['TranslationNode']] = None,
        items: Optional[List[TranslationItem]] = None
    ):
        self.id = id or generate_id()
        self.name = name
        self.children: List[TranslationNode] = children if children is not None else []
        self.items: List[TranslationItem] = items if items is not None else []

    def find_category(self, name: str) -> Optional['TranslationNode']:
        """名前が完全一致する最初の子カテゴリを返す"""
        return next((child for child in self.children if child.name == name), None)

    def find_item(self, key: str) -> Optional[TranslationItem]:
        """キーが完全一致する最初のキーを返す"""
        return next((item for item in self.items if item.key == key), None)

    def __repr__(self) -> str:
        return (f"TranslationNode(name={self.name!r}, "
                f"children={len(self.children)}, items={len(self.items)})")


class TranslationFile:
    """
    ファイル読み込み結果の記述子（ツリーには所有されない）

    Attributes:
        name (str): ファイル名。各キーのvaluesの相関キーとして使われる
        content (Dict[str, Any]): 読み込んだままのネストしたJSONオブジェクト
        uuid (str): 同名ファイルを区別するための読み込みごとの識別子
        path (str, optional): 読み込み元のパス
    """

    def __init__(self, name: str, content: Dict[str, Any], uuid: Optional[str] = None, path: Optional[str] = None):
        self.name = name
        self.content = content
        self.uuid = uuid or generate_id()
        self.path = path

    def __repr__(self) -> str:
        return f"TranslationFile(name={self.name!r})"


def find_or_create_category(node: TranslationNode, name: str) -> TranslationNode:
    """
    子カテゴリを名前で検索し、無ければ末尾に作成して返す

    Args:
        node: 親カテゴリ
        name: カテゴリ名（大文字小文字を区別した完全一致）

    Returns:
        既存または新規のカテゴリ
    """
    category = node.find_category(name)
    if category is None:
        category = TranslationNode(name)
        node.children.append(category)
    return category


def find_or_create_item(node: TranslationNode, key: str) -> TranslationItem:
    """
    キーを名前で検索し、無ければ空のvaluesで末尾に作成して返す

    Args:
        node: キーを保持するカテゴリ
        key: キー名（大文字小文字を区別した完全一致）

    Returns:
        既存または新規のキー
    """
    item = node.find_item(key)
    if item is None:
        item = TranslationItem(key)
        node.items.append(item)
    return item


def iter_items(node: TranslationNode) -> Iterator[TranslationItem]:
    """サブツリー内の全キーを深さ優先で列挙する（自ノードのキーが先、次に子カテゴリ順）"""
    yield from node.items
    for child in node.children:
        yield from iter_items(child)


def count_nodes(node: TranslationNode) -> int:
    """自身を含むサブツリー内のカテゴリ数を数える"""
    return 1 + sum(count_nodes(child) for child in node.children)


def tree_shape(node: TranslationNode, ordered: bool = True) -> Dict[str, Any]:
    """
    値を除いたツリーの形（カテゴリ名とキー名）を比較可能な辞書で返す

    Args:
        node: 対象のカテゴリ
        ordered: Falseの場合、キー名とカテゴリを名前順に並べて順序の違いを無視する
    """
    keys = [item.key for item in node.items]
    children = [tree_shape(child, ordered) for child in node.children]
    if not ordered:
        keys.sort()
        children.sort(key=lambda shape: shape["name"])
    return {"name": node.name, "items": keys, "children": children}

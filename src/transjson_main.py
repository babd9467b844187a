"""
transjson_main.py
TransJSONのエントリーポイント

Fletアプリケーションとして TransJSONApp を起動する薄いラッパーです。
"""
import platform
import sys

import flet as ft

from transjson_app import main as app_main
from logging_config import get_logger

logger = get_logger(__name__)


def main():
    """TransJSONを起動する"""
    logger.info(f"Starting TransJSON on {platform.system()} {platform.release()}, Python {sys.version.split()[0]}")
    ft.app(target=app_main)


if __name__ == "__main__":
    main()

"""Shared helpers for settings components."""

from pathlib import Path

from decouple import AutoConfig

# Project root: the directory that contains ``server/`` and ``config/``
BASE_DIR = Path(__file__).parent.parent.parent.parent

# Reads values from environment variables first, then ``config/.env``
config = AutoConfig(search_path=BASE_DIR.joinpath('config'))

#!/usr/bin/env python3
"""
vnicbox CLI package.
"""

from .parsers import build_parser, main
from .utils import console, load_config

__all__ = ["build_parser", "console", "load_config", "main"]

"""Command-line interface for runecache."""

from __future__ import annotations

import asyncio as asyncio
import logging as logging

from runecache import RuneCache as RuneCache
from runecache import load_config as load_config
from runecache.cli.app import main as main
from runecache.cli.commands import query as query_command
from runecache.cli.commands import sync as sync_command
from runecache.cli.parser import build_parser as build_parser

COMMANDS = {
    "sync": sync_command.run_sync,
    "status": sync_command.run_status,
    "clear": sync_command.run_clear,
    "search": query_command.run_search,
    "bounds": query_command.run_bounds,
    "show": query_command.run_show,
}

__all__ = ["COMMANDS", "build_parser", "main"]

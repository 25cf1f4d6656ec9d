"""Loader importing command and event modules from disk."""
import importlib.machinery
import importlib.util
import itertools
import logging
import os
from types import ModuleType
from typing import Optional

from bandleader.commands.registry import Command
from bandleader.model.events import BotEvent

logger = logging.getLogger("bandleader")

_import_counter = itertools.count()


class _FreshSourceLoader(importlib.machinery.SourceFileLoader):
    """Source loader that never reads cached bytecode, so a reload sees every edit."""

    def get_code(self, fullname):
        return self.source_to_code(self.get_data(self.path), self.path)


def _module_files(directory: str) -> list[str]:
    if not os.path.isdir(directory):
        return []
    return sorted(
        os.path.join(directory, name) for name in os.listdir(directory)
        if name.endswith(".py") and not name.startswith("_")
        and os.path.isfile(os.path.join(directory, name))
    )


def _import_fresh(path: str) -> Optional[ModuleType]:
    """Import a module from a file, bypassing sys.modules so edits are picked up on reload."""
    module_name = f"bandleader_plugin_{next(_import_counter)}_{os.path.splitext(os.path.basename(path))[0]}"
    spec = importlib.util.spec_from_file_location(module_name, path, loader=_FreshSourceLoader(module_name, path))
    if spec is None or spec.loader is None:
        logger.error(f"Cannot import {path} - skipping")
        return None
    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
    except Exception:
        logger.exception(f"Failed to import {path} - skipping")
        return None
    return module


def _load_attribute(directory: str, attribute: str, expected_type: type) -> list:
    found = []
    for path in _module_files(directory):
        module = _import_fresh(path)
        if module is None:
            continue
        value = getattr(module, attribute, None)
        if value is None:
            logger.debug(f"{path} has no {attribute} - skipping")
            continue
        if not isinstance(value, expected_type):
            logger.error(f"{path} exports a {attribute} that is not a {expected_type.__name__} - skipping")
            continue
        found.append(value)
    return found


def discover_commands(command_path: str, group: str) -> list[Command]:
    """Import all command modules of a group and collect their ``command`` objects."""
    return _load_attribute(os.path.join(command_path, group), "command", Command)


def discover_events(event_path: str) -> list[BotEvent]:
    """Import all event modules and collect their ``event`` objects."""
    return _load_attribute(event_path, "event", BotEvent)

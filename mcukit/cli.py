"""Dispatching of console commands, given as text or JSON, to their handlers."""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional

from .cmdline import CommandLineSyntaxError, Param, parse_command_line

log = logging.getLogger(__name__)

ProcessFn = Callable[[List[Param], Any], int]


@dataclass(frozen=True)
class ParmHandler:
    """A command: its name (first word of a line), handler and help text."""

    parm: str
    process: ProcessFn
    help: str = ""


class _JsonObject(list):
    """JSON object kept as an ordered list of (key, value) pairs."""


def _to_python(value):
    if isinstance(value, _JsonObject):
        return {k: _to_python(v) for k, v in value}
    if isinstance(value, list):
        return [_to_python(v) for v in value]
    return value


def _as_text(value) -> Optional[str]:
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        return None
    return json.dumps(value)


class CommandProcessor:
    """Parses command lines and JSON commands and runs the matching handler.

    Handlers are called as ``process(params, writer)`` where params is a
    list of ``(key, value)`` pairs whose first key is the command name; they
    write their own output to WRITER.
    """

    def __init__(
        self,
        handlers: Iterable[ParmHandler] = (),
        check_password: Optional[Callable[[List[Param], Any], bool]] = None,
        json_hook: Optional[Callable[[str], bool]] = None,
        json_obj_hook: Optional[Callable[[Any, dict], bool]] = None,
        text_hook: Optional[Callable[[str], bool]] = None,
    ):
        self._handlers = {h.parm: h for h in handlers}
        self._check_password = check_password
        self._json_hook = json_hook
        self._json_obj_hook = json_obj_hook
        self._text_hook = text_hook
        self._lock = threading.RLock()

    @property
    def handlers(self) -> tuple:
        return tuple(self._handlers.values())

    def find_handler(self, key: str) -> Optional[ParmHandler]:
        return self._handlers.get(key)

    def process_parameters(self, params: List[Param], writer) -> int:
        """Run the handler named by the first key.  Raises LookupError if none."""
        if not params:
            raise ValueError("empty parameter list")
        name = params[0][0]
        handler = self.find_handler(name)
        if handler is None:
            raise LookupError(f"no handler for command {name!r}")
        return handler.process(list(params), writer)

    def process_cmdline(self, line: str, writer) -> Optional[int]:
        """Parse LINE and run its command; returns the handler's result.

        Returns None when a hook consumed the line, the line was empty, or
        the password check refused it.
        """
        if self._text_hook and self._text_hook(line):
            return None
        params = parse_command_line(line)
        if not params:
            return None
        if self._check_password and not self._check_password(params, writer):
            return None
        return self.process_parameters(params, writer)

    def process_json(self, text: str, writer) -> bool:
        """Run every command object found in the JSON root object TEXT.

        Returns False if TEXT is not a JSON object.
        """
        if self._json_hook and self._json_hook(text):
            return True
        try:
            root = json.loads(text, object_pairs_hook=_JsonObject)
        except ValueError:
            log.error("invalid JSON command: %s", text)
            return False
        if not isinstance(root, _JsonObject):
            return False

        for key, value in root:
            if not isinstance(value, _JsonObject):
                continue
            if key == "json":
                if self._json_obj_hook:
                    self._json_obj_hook(writer, _to_python(value))
                continue
            self._process_json_command(key, value, writer)
        return True

    def _process_json_command(self, name: str, obj: _JsonObject, writer) -> None:
        params: List[Param] = [(name, "")]
        nested = False
        for key, value in obj:
            text_value = _as_text(value)
            if text_value is None:
                nested = True
            params.append((key, text_value))
        if nested:
            log.error("no nested objects allowed in cli command %r", name)
        try:
            result = self.process_parameters(params, writer)
        except LookupError as exc:
            log.error("%s", exc)
            return
        if isinstance(result, int) and result < 0:
            log.error("handler for %r returned %d", name, result)

    def loop_once(self, reader, writer) -> Optional[str]:
        """Read one command line from READER and process it.

        Returns the processed line, or None if no line was ready.
        """
        line = reader.read_command_line()
        if line is None:
            return None
        with self._lock:
            if line.startswith("{"):
                self.process_json(line, writer)
            else:
                try:
                    self.process_cmdline(line, writer)
                except CommandLineSyntaxError as exc:
                    log.warning("cannot parse command line %r: %s", line, exc)
                except LookupError as exc:
                    log.warning("%s", exc)
        return line
from __future__ import annotations

import re
from typing import Callable, List, Optional

from aegisprobe.plugins.base import MitigationCheck, PluginRegistry

_PIE_PHRASE_RE = re.compile(r"position[\s-]+independent[\s-]+executable", re.IGNORECASE)
_FLAG_TOKEN_RE = re.compile(r"[RWE]{1,3}")


def header_field(output: str, field: str) -> Optional[str]:
    """Value of a ``Key: value`` line from a header dump, whitespace tolerant."""
    for line in output.splitlines():
        key, sep, value = line.partition(":")
        if sep and key.strip() == field:
            return value.strip()
    return None


def gnu_stack_flags(output: str) -> Optional[str]:
    """Flag letters of the GNU_STACK program header, or None if absent.

    readelf prints 64-bit program headers over two lines, so a following
    line that starts with an address is read as part of the entry.
    """
    lines = output.splitlines()
    for index, line in enumerate(lines):
        tokens = line.split()
        if "GNU_STACK" not in tokens:
            continue
        tokens = tokens[tokens.index("GNU_STACK") + 1:]
        if index + 1 < len(lines):
            following = lines[index + 1].split()
            if following and following[0].startswith("0x"):
                tokens.extend(following)
        return "".join(token for token in tokens if _FLAG_TOKEN_RE.fullmatch(token))
    return None


def aslr_capable(output: str) -> bool:
    return _PIE_PHRASE_RE.search(output) is not None


def dep_enabled(output: str) -> bool:
    flags = gnu_stack_flags(output)
    if flags is None:
        return False
    return not {"R", "W", "E"} <= set(flags)


def stack_canary_present(output: str) -> bool:
    return "__stack_chk_fail" in output


def bind_now_present(output: str) -> bool:
    return "BIND_NOW" in output


def dynamic_type(output: str) -> bool:
    value = header_field(output, "Type")
    return value is not None and value.split()[:1] == ["DYN"]


def nx_enabled(output: str) -> bool:
    flags = gnu_stack_flags(output)
    if flags is None:
        return False
    return "E" not in flags


class ReadelfCheck(MitigationCheck):
    tool = "readelf"

    def __init__(self, name: str, option: str, rule: Callable[[str], bool]) -> None:
        self.name = name
        self.option = option
        self.rule = rule

    def command(self, path: str, executable: str) -> List[str]:
        return [executable, self.option, path]

    def evaluate(self, output: str) -> bool:
        return self.rule(output)


def default_check_registry() -> PluginRegistry[MitigationCheck]:
    registry: PluginRegistry[MitigationCheck] = PluginRegistry()
    registry.register(ReadelfCheck("aslr", "-h", aslr_capable))
    registry.register(ReadelfCheck("dep", "-l", dep_enabled))
    registry.register(ReadelfCheck("stack_canary", "-s", stack_canary_present))
    registry.register(ReadelfCheck("relro", "-d", bind_now_present))
    registry.register(ReadelfCheck("pie", "-h", dynamic_type))
    registry.register(ReadelfCheck("nx", "-l", nx_enabled))
    return registry

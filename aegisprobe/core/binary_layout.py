from __future__ import annotations

import re
from typing import List, Optional, Tuple

from aegisprobe.core.errors import ToolInvocationError
from aegisprobe.core.models import BinaryLayout, ResourceRow, SectionInfo, SymbolInfo
from aegisprobe.infra.logging_utils import LOGGER
from aegisprobe.infra.tooling import DEFAULT_TIMEOUT, ToolRunner

PSEUDO_SECTIONS = ("*UND*", "*ABS*", "*COM*")
RESOURCE_SECTION = ".rodata"

# " 2000 01000200 48656c6c 6f2c2077 6f726c64  ....Hello, world"
_CONTENTS_ROW_RE = re.compile(r"^\s*([0-9a-fA-F]+)((?: [0-9a-fA-F]{2,8}){1,4})(?: {2,}(.*))?$")


def _alignment(token: str) -> int:
    base, sep, exponent = token.partition("**")
    if sep:
        return int(base) ** int(exponent)
    return int(token, 16)


def parse_section_headers(output: str) -> List[SectionInfo]:
    """Parse ``objdump -h``; rows that do not fit the table are skipped."""
    sections: List[SectionInfo] = []
    lines = output.splitlines()
    for index, line in enumerate(lines):
        tokens = line.split()
        if len(tokens) < 7 or not tokens[0].isdigit():
            continue
        try:
            section = SectionInfo(
                index=int(tokens[0]),
                name=tokens[1],
                size=int(tokens[2], 16),
                vma=int(tokens[3], 16),
                lma=int(tokens[4], 16),
                file_offset=int(tokens[5], 16),
                alignment=_alignment(tokens[6]),
                flags=_section_flags(lines[index + 1] if index + 1 < len(lines) else ""),
            )
        except ValueError:
            continue
        sections.append(section)
    return sections


def _section_flags(line: str) -> Tuple[str, ...]:
    stripped = line.strip()
    if not stripped or stripped.split()[0].isdigit():
        return ()
    return tuple(flag.strip() for flag in stripped.split(",") if flag.strip())


def parse_dynamic_symbols(output: str) -> List[SymbolInfo]:
    """Parse ``objdump -T`` rows into symbols."""
    symbols: List[SymbolInfo] = []
    for line in output.splitlines():
        tokens = line.split()
        if len(tokens) < 4:
            continue
        try:
            address = int(tokens[0], 16)
        except ValueError:
            continue
        section_index = next(
            (i for i, token in enumerate(tokens[1:], start=1) if token in PSEUDO_SECTIONS or token.startswith(".")),
            None,
        )
        if section_index is None or len(tokens) < section_index + 3:
            continue
        try:
            size = int(tokens[section_index + 1], 16)
        except ValueError:
            continue
        rest = tokens[section_index + 2:]
        symbols.append(
            SymbolInfo(
                address=address,
                flags=" ".join(tokens[1:section_index]),
                section=tokens[section_index],
                size=size,
                name=rest[-1],
                version=" ".join(rest[:-1]),
            )
        )
    return symbols


def parse_section_contents(output: str) -> List[ResourceRow]:
    """Parse ``objdump -s`` rows; headers and other chatter are skipped."""
    rows: List[ResourceRow] = []
    for line in output.splitlines():
        match = _CONTENTS_ROW_RE.match(line)
        if match is None:
            continue
        rows.append(
            ResourceRow(
                offset=int(match.group(1), 16),
                data=match.group(2).strip(),
                text=match.group(3) or "",
            )
        )
    return rows


class BinaryLayoutInspector:
    """Section, dynamic-symbol and read-only data listings via objdump.

    A failed invocation yields an empty listing, logged at WARNING.
    """

    def __init__(self, runner: ToolRunner, timeout: float = DEFAULT_TIMEOUT, executable: str = "objdump") -> None:
        self.runner = runner
        self.timeout = timeout
        self.executable = executable

    def _dump(self, options: List[str], path: str, timed_out: Optional[List[str]] = None) -> Optional[str]:
        try:
            return self.runner.run([self.executable, *options, path], timeout=self.timeout)
        except ToolInvocationError as exc:
            LOGGER.warning(
                "Layout inspection failed",
                extra={"extra_data": {"options": options, "path": path, "error": str(exc)}},
            )
            if exc.timed_out and timed_out is not None:
                timed_out.append(" ".join(options))
            return None

    def sections(self, path: str) -> List[SectionInfo]:
        output = self._dump(["-h"], path)
        return parse_section_headers(output) if output else []

    def dynamic_symbols(self, path: str) -> List[SymbolInfo]:
        output = self._dump(["-T"], path)
        return parse_dynamic_symbols(output) if output else []

    def imports(self, path: str) -> List[SymbolInfo]:
        return [symbol for symbol in self.dynamic_symbols(path) if symbol.undefined]

    def exports(self, path: str) -> List[SymbolInfo]:
        return [symbol for symbol in self.dynamic_symbols(path) if not symbol.undefined]

    def resources(self, path: str, section: str = RESOURCE_SECTION) -> List[ResourceRow]:
        output = self._dump(["-s", "-j", section], path)
        return parse_section_contents(output) if output else []

    def inspect(self, path: str) -> BinaryLayout:
        timed_out: List[str] = []
        sections = self._dump(["-h"], path, timed_out)
        symbols = parse_dynamic_symbols(self._dump(["-T"], path, timed_out) or "")
        contents = self._dump(["-s", "-j", RESOURCE_SECTION], path, timed_out)
        return BinaryLayout(
            sections=tuple(parse_section_headers(sections or "")),
            imports=tuple(s for s in symbols if s.undefined),
            exports=tuple(s for s in symbols if not s.undefined),
            resources=tuple(parse_section_contents(contents or "")),
            timed_out=tuple(timed_out),
        )

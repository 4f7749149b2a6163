import threading
import time
from typing import Dict, Iterable, List, Optional, Sequence

import pytest

from aegisprobe.core.errors import ToolInvocationError

READELF_HEADER_PIE = """ELF Header:
  Magic:   7f 45 4c 46 02 01 01 00 00 00 00 00 00 00 00 00
  Class:                             ELF64
  Data:                              2's complement, little endian
  Type:                              DYN (Position-Independent Executable file)
  Machine:                           Advanced Micro Devices X86-64
  Entry point address:               0x6ab0
"""

READELF_HEADER_EXEC = """ELF Header:
  Class:                             ELF64
  Type:                              EXEC (Executable file)
  Machine:                           Advanced Micro Devices X86-64
"""

READELF_SEGMENTS_NX = """
Elf file type is DYN (Position-Independent Executable file)
Entry point 0x6ab0
There are 13 program headers, starting at offset 64

Program Headers:
  Type           Offset             VirtAddr           PhysAddr
                 FileSiz            MemSiz              Flags  Align
  PHDR           0x0000000000000040 0x0000000000000040 0x0000000000000040
                 0x00000000000002d8 0x00000000000002d8  R      0x8
  LOAD           0x0000000000004000 0x0000000000004000 0x0000000000004000
                 0x0000000000013146 0x0000000000013146  R E    0x1000
  GNU_STACK      0x0000000000000000 0x0000000000000000 0x0000000000000000
                 0x0000000000000000 0x0000000000000000  RW     0x10
  GNU_RELRO      0x0000000000022a10 0x0000000000023a10 0x0000000000023a10
                 0x00000000000015f0 0x00000000000015f0  R      0x1
"""

READELF_SEGMENTS_EXECSTACK = READELF_SEGMENTS_NX.replace("RW     0x10", "RWE    0x10")

READELF_SEGMENTS_32BIT = """
Program Headers:
  Type           Offset   VirtAddr   PhysAddr   FileSiz MemSiz  Flg Align
  LOAD           0x000000 0x08048000 0x08048000 0x005c8 0x005c8 R E 0x1000
  GNU_STACK      0x000000 0x00000000 0x00000000 0x00000 0x00000 RW  0x10
"""

READELF_SYMBOLS = """
Symbol table '.dynsym' contains 3 entries:
   Num:    Value          Size Type    Bind   Vis      Ndx Name
     0: 0000000000000000     0 NOTYPE  LOCAL  DEFAULT  UND
     1: 0000000000000000     0 FUNC    GLOBAL DEFAULT  UND __stack_chk_fail@GLIBC_2.4 (2)
     2: 0000000000000000     0 FUNC    GLOBAL DEFAULT  UND puts@GLIBC_2.2.5 (3)
"""

READELF_DYNAMIC = """
Dynamic section at offset 0x22a58 contains 24 entries:
  Tag        Type                         Name/Value
 0x0000000000000001 (NEEDED)             Shared library: [libc.so.6]
 0x000000000000001e (FLAGS)              BIND_NOW
 0x000000006ffffffb (FLAGS_1)            Flags: NOW PIE
"""

OBJDUMP_SECTIONS = """
sample:     file format elf64-x86-64

Sections:
Idx Name          Size      VMA               LMA               File off  Algn
  0 .interp       0000001c  0000000000000318  0000000000000318  00000318  2**0
                  CONTENTS, ALLOC, LOAD, READONLY, DATA
  1 .text         00013146  0000000000004000  0000000000004000  00004000  2**4
                  CONTENTS, ALLOC, LOAD, READONLY, CODE
  2 .bss          00000008  0000000000023ae0  0000000000023ae0  00022ae0  2**3
                  ALLOC
"""

OBJDUMP_DYNAMIC_SYMBOLS = """
sample:     file format elf64-x86-64

DYNAMIC SYMBOL TABLE:
0000000000000000      DF *UND*\t0000000000000000 (GLIBC_2.4)  __stack_chk_fail
0000000000000000  w   D  *UND*\t0000000000000000  Base        __gmon_start__
0000000000004120 g    DF .text\t0000000000000042  Base        sample_entry
0000000000023ae0 g    DO .bss\t0000000000000008 (GLIBC_2.2.5) stdout
"""

OBJDUMP_RODATA = """
sample:     file format elf64-x86-64

Contents of section .rodata:
 2000 01000200 48656c6c 6f2c2077 6f726c64  ....Hello, world
 2010 00000000                             ....
"""

HARDENED_OUTPUTS: Dict[str, str] = {
    "readelf -h": READELF_HEADER_PIE,
    "readelf -l": READELF_SEGMENTS_NX,
    "readelf -s": READELF_SYMBOLS,
    "readelf -d": READELF_DYNAMIC,
    "objdump -h": OBJDUMP_SECTIONS,
    "objdump -T": OBJDUMP_DYNAMIC_SYMBOLS,
    "objdump -s": OBJDUMP_RODATA,
}


class FakeRunner:
    """Returns canned tool output keyed by "<tool> <option>"."""

    def __init__(
        self,
        outputs: Optional[Dict[str, str]] = None,
        failing: Iterable[str] = (),
        delays: Optional[Dict[str, float]] = None,
        timeouts: Iterable[str] = (),
    ) -> None:
        self.outputs = dict(HARDENED_OUTPUTS if outputs is None else outputs)
        self.failing = set(failing)
        self.delays = delays or {}
        self.timeouts = set(timeouts)
        self.calls: List[List[str]] = []
        self._lock = threading.Lock()

    def run(self, command: Sequence[str], timeout: float = 8.0) -> str:
        with self._lock:
            self.calls.append(list(command))
        key = f"{command[0]} {command[1]}"
        if key in self.delays:
            time.sleep(self.delays[key])
        if key in self.timeouts:
            raise ToolInvocationError(key, f"timed out after {timeout}s", timed_out=True)
        if key in self.failing:
            raise ToolInvocationError(key, "tool not found")
        return self.outputs.get(key, "")


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()

"""Source positions for errors raised by live-loaded code.

Produces the three optional diagnostic attributes the debug page
reads from an exception:

- ``id``: the source file that failed
- ``frame``: a code frame, the failing line marked with ``>`` and,
  when the column is known, a caret underneath
- ``plugin_code``: the compiled output for the failing line (bytecode
  listing), or the offending text for syntax errors
"""

import contextlib
import dis
import linecache
import types
from pathlib import Path

_CONTEXT_LINES = 2


def code_frame(source: str, lineno: int, column: int | None = None) -> str:
    """Render *source* around *lineno* (1-based) as a code frame.

    ::

          3 | async def render(url, context):
        > 4 |     return {"app_html": markup(}
            |                               ^
          5 |
    """
    lines = source.splitlines()
    if not 1 <= lineno <= len(lines):
        return ""
    start = max(1, lineno - _CONTEXT_LINES)
    end = min(len(lines), lineno + _CONTEXT_LINES)
    width = len(str(end))

    out: list[str] = []
    for number in range(start, end + 1):
        marker = ">" if number == lineno else " "
        out.append(f"{marker} {number:>{width}} | {lines[number - 1]}".rstrip())
        if number == lineno and column is not None and column > 0:
            out.append(f"  {'':>{width}} | {' ' * (column - 1)}^")
    return "\n".join(out)


def bytecode_listing(code: types.CodeType, lineno: int) -> str:
    """Disassemble the instructions *code* compiled for *lineno*."""
    out: list[str] = []
    for instr in dis.get_instructions(code):
        positions = instr.positions
        if positions is None or positions.lineno != lineno:
            continue
        arg = f" {instr.argrepr}" if instr.argrepr else ""
        out.append(f"{instr.offset:>4} {instr.opname}{arg}")
    return "\n".join(out)


def is_under(filename: str, root: Path) -> bool:
    """True if *filename* is a real file inside *root* (and not a dependency)."""
    if not filename or filename.startswith("<"):
        return False
    if "site-packages" in filename:
        return False
    try:
        return Path(filename).resolve().is_relative_to(root)
    except (OSError, ValueError):
        return False


def _innermost_frame(
    tb: types.TracebackType | None, root: Path
) -> tuple[types.FrameType, int] | None:
    found: tuple[types.FrameType, int] | None = None
    while tb is not None:
        if is_under(tb.tb_frame.f_code.co_filename, root):
            found = (tb.tb_frame, tb.tb_lineno)
        tb = tb.tb_next
    return found


def source_positions(exc: BaseException, root: Path) -> dict[str, str] | None:
    """Locate *exc* in source under *root*.

    Returns ``{"id", "frame", "plugin_code"}`` or ``None`` when neither
    the error itself (syntax errors) nor any traceback frame points
    into *root*.
    """
    if isinstance(exc, SyntaxError) and exc.filename and is_under(exc.filename, root):
        linecache.checkcache(exc.filename)
        source = "".join(linecache.getlines(exc.filename))
        return {
            "id": exc.filename,
            "frame": code_frame(source, exc.lineno or 0, exc.offset),
            "plugin_code": (exc.text or "").rstrip("\n"),
        }

    located = _innermost_frame(exc.__traceback__, root)
    if located is None:
        return None
    frame, lineno = located
    filename = frame.f_code.co_filename
    linecache.checkcache(filename)
    source = "".join(linecache.getlines(filename, frame.f_globals))
    return {
        "id": filename,
        "frame": code_frame(source, lineno),
        "plugin_code": bytecode_listing(frame.f_code, lineno),
    }


def attach_positions(exc: BaseException, root: Path) -> None:
    """Set ``id``/``frame``/``plugin_code`` on *exc* where they are missing."""
    positions = source_positions(exc, root)
    if positions is None:
        return
    for name, value in positions.items():
        if getattr(exc, name, None):
            continue
        # Some extension exception types reject new attributes
        with contextlib.suppress(AttributeError, TypeError):
            setattr(exc, name, value)

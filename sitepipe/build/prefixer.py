"""
Vendor prefixing for compiled CSS.

Targets a single fixed browser range ("last 2 versions"). Works on the
expanded output of libsass, where every declaration sits on its own line
inside an innermost ``{ ... }`` block. Prefixed declarations are inserted
directly above the standard one with the same indentation (no cascade
alignment), and a declaration that already has its prefixed twin in the
same block is left alone.
"""

from __future__ import annotations

import re

# Properties that still need a prefix somewhere in the target range
PROPERTY_PREFIXES: dict[str, tuple[str, ...]] = {
    "appearance": ("-webkit-", "-moz-"),
    "backdrop-filter": ("-webkit-",),
    "backface-visibility": ("-webkit-",),
    "box-decoration-break": ("-webkit-",),
    "clip-path": ("-webkit-",),
    "hyphens": ("-webkit-", "-ms-"),
    "mask": ("-webkit-",),
    "mask-image": ("-webkit-",),
    "mask-size": ("-webkit-",),
    "print-color-adjust": ("-webkit-",),
    "text-size-adjust": ("-webkit-", "-moz-", "-ms-"),
    "user-select": ("-webkit-", "-moz-", "-ms-"),
}

# (property, value) pairs whose value needs a prefix
VALUE_PREFIXES: dict[tuple[str, str], tuple[str, ...]] = {
    ("position", "sticky"): ("-webkit-",),
}

_BLOCK = re.compile(r"\{([^{}]*)\}")
_DECLARATION = re.compile(
    r"^(?P<indent>[ \t]*)(?P<prop>(?!--)-?[a-z][a-z-]*)\s*:\s*(?P<value>[^;]*?)\s*(?P<semi>;?)\s*$"
)


def _prefix_block(body: str) -> str:
    lines = body.split("\n")
    present = {
        (m.group("prop"), m.group("value"))
        for m in (_DECLARATION.match(line) for line in lines)
        if m
    }
    present_props = {prop for prop, _ in present}

    out: list[str] = []
    for line in lines:
        m = _DECLARATION.match(line)
        if m:
            indent, prop, value = m.group("indent"), m.group("prop"), m.group("value")
            for prefix in PROPERTY_PREFIXES.get(prop, ()):
                if prefix + prop not in present_props:
                    out.append(f"{indent}{prefix}{prop}: {value};")
            for prefix in VALUE_PREFIXES.get((prop, value), ()):
                if (prop, prefix + value) not in present:
                    out.append(f"{indent}{prop}: {prefix}{value};")
        out.append(line)
    return "\n".join(out)


def autoprefix(css: str) -> str:
    """Insert vendor-prefixed declarations into expanded CSS."""
    return _BLOCK.sub(lambda m: "{" + _prefix_block(m.group(1)) + "}", css)

"""Key press events and chord parsing."""
from dataclasses import dataclass
from enum import IntFlag
from typing import Optional


class Mod(IntFlag):
    """Modifier bits of a key press."""

    NONE = 0
    SHIFT = 1
    ALT = 2
    CTRL = 4


_MOD_NAMES = {
    "shift": Mod.SHIFT,
    "alt": Mod.ALT,
    "meta": Mod.ALT,
    "ctrl": Mod.CTRL,
    "control": Mod.CTRL,
}

_KEY_LABELS = {
    "tab": "Tab",
    "enter": "Enter",
    "escape": "Esc",
    "space": "Space",
    "backspace": "Backspace",
}


@dataclass(frozen=True)
class KeyPress:
    """A single key press: a key code plus modifier bits.

    code is either a single character ("a", "Q", "/") or a key name
    ("tab", "enter", "up", "f5"). text holds the printable text the key
    produces, if any.
    """

    code: str
    mod: Mod = Mod.NONE
    text: Optional[str] = None

    def matches(self, other: "KeyPress") -> bool:
        """True if both presses are the same chord (text is ignored)."""
        return self.code == other.code and self.mod == other.mod

    @property
    def label(self) -> str:
        """Human readable chord, e.g. "Ctrl+A"."""
        parts = []
        if self.mod & Mod.CTRL:
            parts.append("Ctrl")
        if self.mod & Mod.ALT:
            parts.append("Alt")
        if self.mod & Mod.SHIFT:
            parts.append("Shift")
        code = self.code
        if code in _KEY_LABELS:
            code = _KEY_LABELS[code]
        elif len(code) == 1 and self.mod & Mod.CTRL:
            code = code.upper()
        elif len(code) > 1:
            code = code.capitalize()
        parts.append(code)
        return "+".join(parts)


def parse_chord(spec: str) -> KeyPress:
    """Parse a chord such as "ctrl+a", "tab" or "q" into a KeyPress.

    Raises:
        ValueError: On an unknown modifier or an empty key
    """
    *mods, name = spec.strip().split("+")
    mod = Mod.NONE
    for m in mods:
        try:
            mod |= _MOD_NAMES[m.strip().lower()]
        except KeyError:
            raise ValueError(f"Unknown modifier {m!r} in chord {spec!r}") from None
    if not name:
        raise ValueError(f"Missing key in chord {spec!r}")
    if name == "space":
        name = " "
    if len(name) > 1:
        name = name.lower()
    text = name if len(name) == 1 and not mod & (Mod.CTRL | Mod.ALT) else None
    return KeyPress(code=name, mod=mod, text=text)


def from_textual(key: str, character: Optional[str] = None) -> KeyPress:
    """Convert a Textual key event (key name + character) to a KeyPress."""
    *mods, name = key.split("+")
    mod = Mod.NONE
    for m in mods:
        mod |= _MOD_NAMES.get(m, Mod.NONE)

    if character and len(character) == 1 and character.isprintable() and not mod & Mod.CTRL:
        return KeyPress(code=character, mod=mod & ~Mod.SHIFT, text=character)

    if name == "space":
        name = " "
    elif name.startswith("upper_"):
        # Textual reports some shifted letters this way
        name = name[len("upper_"):].upper()
    return KeyPress(code=name, mod=mod)

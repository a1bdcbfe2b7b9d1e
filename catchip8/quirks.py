"""
Compatibility quirks

Historical CHIP-8 interpreters disagree on a handful of instructions. Each
divergence is a field here, resolved once when the VM is built.

    shift_mode              8XY6/8XYE shift Vy into Vx (legacy) or Vx in place (modern)
    logic_quirk_reset_vf    8XY1/8XY2/8XY3 also clear VF (legacy)
    jump_offset_mode        BNNN adds V0 (legacy) or BXNN adds VX (modern)
    save_load_increments_i  FX55/FX65 leave I = I + X + 1 (legacy)
    draw_clip_mode          DXYN clips (default) or wraps at the screen edges
    unknown_opcode_policy   invalid opcodes halt (strict) or are skipped (lenient)
"""

from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any, Dict, Mapping


class ShiftMode(Enum):
    LEGACY = 'legacy'
    MODERN = 'modern'


class JumpMode(Enum):
    LEGACY = 'legacy'
    MODERN = 'modern'


class ClipMode(Enum):
    CLIP = 'clip'
    WRAP = 'wrap'


class OpcodePolicy(Enum):
    STRICT = 'strict'
    LENIENT = 'lenient'


_TRUE = {'true', 'yes', 'on', '1'}
_FALSE = {'false', 'no', 'off', '0'}


def _parse_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValueError(f"{name}: expected true or false, got {value!r}")


def _parse_enum(name: str, enum_type, value: Any):
    if isinstance(value, enum_type):
        return value
    try:
        return enum_type(str(value).strip().lower())
    except ValueError:
        choices = "|".join(member.value for member in enum_type)
        raise ValueError(f"{name}: expected {choices}, got {value!r}") from None


@dataclass(frozen=True)
class Quirks:
    shift_mode: ShiftMode = ShiftMode.MODERN
    logic_quirk_reset_vf: bool = False
    jump_offset_mode: JumpMode = JumpMode.LEGACY
    save_load_increments_i: bool = False
    draw_clip_mode: ClipMode = ClipMode.CLIP
    unknown_opcode_policy: OpcodePolicy = OpcodePolicy.STRICT

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any], base: 'Quirks' = None) -> 'Quirks':
        """Build quirks from the textual configuration surface, e.g. {'shift_mode': 'legacy'}"""
        known = {f.name: f for f in fields(cls)}
        unknown = set(options) - set(known)
        if unknown:
            raise ValueError(f"Unknown quirk option(s): {', '.join(sorted(unknown))}")

        values = {}
        for name, value in options.items():
            default = getattr(cls, name)
            if isinstance(default, bool):
                values[name] = _parse_bool(name, value)
            else:
                values[name] = _parse_enum(name, type(default), value)
        return replace(base or cls(), **values)

    @classmethod
    def preset(cls, name: str) -> 'Quirks':
        try:
            return PRESETS[name.lower()]
        except KeyError:
            raise ValueError(
                f"Unknown quirk preset {name!r}; choose from {', '.join(sorted(PRESETS))}"
            ) from None

    def as_dict(self) -> Dict[str, Any]:
        return {
            f.name: (value.value if isinstance(value, Enum) else value)
            for f in fields(self)
            for value in [getattr(self, f.name)]
        }


PRESETS = {
    'modern': Quirks(),
    # Original COSMAC VIP interpreter
    'cosmac': Quirks(
        shift_mode=ShiftMode.LEGACY,
        logic_quirk_reset_vf=True,
        jump_offset_mode=JumpMode.LEGACY,
        save_load_increments_i=True,
    ),
    'schip': Quirks(
        shift_mode=ShiftMode.MODERN,
        jump_offset_mode=JumpMode.MODERN,
    ),
}

"""Colour helpers for editor styling."""

from __future__ import annotations

from dataclasses import dataclass, replace

_LUM_R = 13933  # 0.2126 * 256 * 256
_LUM_G = 46871  # 0.7152 * 256 * 256
_LUM_B = 4732  # 0.0722 * 256 * 256
_LUM_TOTAL = _LUM_R + _LUM_G + _LUM_B

_DISABLED_BLEND = 80
_DISABLED_ALPHA = 128 + 32


def _check_byte(name: str, value: int) -> None:
    if not 0 <= value <= 0xFF:
        raise ValueError(f"{name} must be in 0..255, got {value}")


@dataclass(frozen=True)
class NRGBA:
    """A non-premultiplied 8-bit RGBA colour."""

    r: int = 0
    g: int = 0
    b: int = 0
    a: int = 0

    def __post_init__(self) -> None:
        for name in ("r", "g", "b", "a"):
            _check_byte(name, getattr(self, name))


def mul_alpha(c: NRGBA, alpha: int) -> NRGBA:
    """Scale the colour's alpha by *alpha*/255."""
    _check_byte("alpha", alpha)
    return replace(c, a=c.a * alpha // 0xFF)


def approx_luminance(c: NRGBA) -> int:
    """Fast integer approximation of the colour's luminance."""
    return (_LUM_R * c.r + _LUM_G * c.g + _LUM_B * c.b) // _LUM_TOTAL


def mix(c1: NRGBA, c2: NRGBA, a: int) -> NRGBA:
    """Mix *c1* and *c2* weighted by a/256 and (1 - a/256)."""
    _check_byte("a", a)

    def channel(x: int, y: int) -> int:
        return (x * a + y * (256 - a)) // 256 & 0xFF

    return NRGBA(
        r=channel(c1.r, c2.r),
        g=channel(c1.g, c2.g),
        b=channel(c1.b, c2.b),
        a=channel(c1.a, c2.a),
    )


def disabled(c: NRGBA) -> NRGBA:
    """Desaturate the colour towards its luminance and fade its alpha."""
    lum = approx_luminance(c)
    blended = mix(c, NRGBA(r=lum, g=lum, b=lum, a=c.a), _DISABLED_BLEND)
    return mul_alpha(blended, _DISABLED_ALPHA)


def blend_disabled_color(is_disabled: bool, c: NRGBA) -> NRGBA:
    """Return the disabled variant of *c* when *is_disabled* is true."""
    return disabled(c) if is_disabled else c
"""Theme resolution for the generated stylesheet.

A project gets exactly one theme block in place of the stylesheet's theme
marker:

* no theme chosen: :data:`DEFAULT_THEME` (already in ``oklch()``);
* ``ThemeSource(kind="css")``: the CSS text as given;
* ``ThemeSource(kind="url")``: fetched with httpx, then optionally rewritten
  so every colour custom property is expressed in ``oklch()``.

The OKLCH conversion is the standard sRGB -> linear sRGB -> OKLab -> OKLCH
transform (Björn Ottosson's matrices), not an approximation.
"""

from __future__ import annotations

import colorsys
import math
import re
from typing import Optional

import httpx

from create_z3.config import ScaffoldConfig, ThemeSource
from create_z3.utils import print_dim, print_success, print_warning, step_status

DEFAULT_THEME = """\
:root {
  --radius: 0.625rem;
  --background: oklch(1 0 0);
  --foreground: oklch(0.145 0 0);
  --card: oklch(1 0 0);
  --card-foreground: oklch(0.145 0 0);
  --popover: oklch(1 0 0);
  --popover-foreground: oklch(0.145 0 0);
  --primary: oklch(0.205 0 0);
  --primary-foreground: oklch(0.985 0 0);
  --secondary: oklch(0.97 0 0);
  --secondary-foreground: oklch(0.205 0 0);
  --muted: oklch(0.97 0 0);
  --muted-foreground: oklch(0.556 0 0);
  --accent: oklch(0.97 0 0);
  --accent-foreground: oklch(0.205 0 0);
  --destructive: oklch(0.577 0.245 27.325);
  --border: oklch(0.922 0 0);
  --input: oklch(0.922 0 0);
  --ring: oklch(0.708 0 0);
  --chart-1: oklch(0.646 0.222 41.116);
  --chart-2: oklch(0.6 0.118 184.704);
  --chart-3: oklch(0.398 0.07 227.392);
  --chart-4: oklch(0.828 0.189 84.429);
  --chart-5: oklch(0.769 0.188 70.08);
  --sidebar: oklch(0.985 0 0);
  --sidebar-foreground: oklch(0.145 0 0);
  --sidebar-primary: oklch(0.205 0 0);
  --sidebar-primary-foreground: oklch(0.985 0 0);
  --sidebar-accent: oklch(0.97 0 0);
  --sidebar-accent-foreground: oklch(0.205 0 0);
  --sidebar-border: oklch(0.922 0 0);
  --sidebar-ring: oklch(0.708 0 0);
}

.dark {
  --background: oklch(0.145 0 0);
  --foreground: oklch(0.985 0 0);
  --card: oklch(0.205 0 0);
  --card-foreground: oklch(0.985 0 0);
  --popover: oklch(0.205 0 0);
  --popover-foreground: oklch(0.985 0 0);
  --primary: oklch(0.922 0 0);
  --primary-foreground: oklch(0.205 0 0);
  --secondary: oklch(0.269 0 0);
  --secondary-foreground: oklch(0.985 0 0);
  --muted: oklch(0.269 0 0);
  --muted-foreground: oklch(0.708 0 0);
  --accent: oklch(0.269 0 0);
  --accent-foreground: oklch(0.985 0 0);
  --destructive: oklch(0.704 0.191 22.216);
  --border: oklch(1 0 0 / 10%);
  --input: oklch(1 0 0 / 15%);
  --ring: oklch(0.556 0 0);
  --chart-1: oklch(0.488 0.243 264.376);
  --chart-2: oklch(0.696 0.17 162.48);
  --chart-3: oklch(0.769 0.188 70.08);
  --chart-4: oklch(0.627 0.265 303.9);
  --chart-5: oklch(0.645 0.246 16.439);
  --sidebar: oklch(0.205 0 0);
  --sidebar-foreground: oklch(0.985 0 0);
  --sidebar-primary: oklch(0.488 0.243 264.376);
  --sidebar-primary-foreground: oklch(0.985 0 0);
  --sidebar-accent: oklch(0.269 0 0);
  --sidebar-accent-foreground: oklch(0.985 0 0);
  --sidebar-border: oklch(1 0 0 / 10%);
  --sidebar-ring: oklch(0.556 0 0);
}"""


class ThemeFetchError(RuntimeError):
    """The remote theme could not be downloaded."""

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(
            f"Theme fetch failed: {reason}\n"
            "Please check the URL and your internet connection, then try again."
        )


# ---------------------------------------------------------------------------
# Colour parsing
# ---------------------------------------------------------------------------

_CUSTOM_PROPERTY_RE = re.compile(r"(--[\w-]+\s*:\s*)([^;{}]+?)(\s*;)")
_HEX_RE = re.compile(r"^#([0-9a-fA-F]{3,4}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")
_FUNC_RE = re.compile(r"^(rgba?|hsla?)\(\s*(.*?)\s*\)$", re.IGNORECASE)
_BARE_HSL_RE = re.compile(r"^(-?\d+(?:\.\d+)?)(?:deg)?\s+(\d+(?:\.\d+)?)%\s+(\d+(?:\.\d+)?)%$")

RGB = tuple[float, float, float]


def _split_args(args: str) -> tuple[list[str], Optional[str]]:
    """Split ``"r, g, b, a"`` or ``"r g b / a"`` into channels and alpha."""
    alpha: Optional[str] = None
    if "/" in args:
        args, alpha = (part.strip() for part in args.split("/", 1))
    parts = [p for p in re.split(r"[\s,]+", args) if p]
    if len(parts) == 4 and alpha is None:
        alpha = parts.pop()
    if len(parts) != 3:
        raise ValueError(f"Expected three colour channels, got {len(parts)}")
    return parts, alpha


def _rgb_channel(token: str) -> float:
    if token.endswith("%"):
        value = float(token[:-1]) / 100
    else:
        value = float(token) / 255
    return min(max(value, 0.0), 1.0)


def _percent(token: str) -> float:
    return min(max(float(token.rstrip("%")) / 100, 0.0), 1.0)


def _hue(token: str) -> float:
    return float(token.removesuffix("deg")) % 360


def _hsl_to_rgb(hue: float, saturation: float, lightness: float) -> RGB:
    return colorsys.hls_to_rgb(hue / 360, lightness, saturation)


def _alpha(token: Optional[str]) -> Optional[float]:
    if token is None:
        return None
    value = float(token[:-1]) / 100 if token.endswith("%") else float(token)
    return min(max(value, 0.0), 1.0)


def parse_color(value: str) -> Optional[tuple[RGB, Optional[float]]]:
    """Parse a CSS colour into sRGB channels in ``[0, 1]`` plus optional alpha.

    Returns ``None`` for values that are not a supported colour syntax
    (lengths, keywords, ``oklch()`` ...). Raises ``ValueError`` for values
    that look like a colour but are malformed.
    """
    text = value.strip()

    hex_match = _HEX_RE.match(text)
    if hex_match:
        digits = hex_match.group(1)
        if len(digits) in (3, 4):
            digits = "".join(ch * 2 for ch in digits)
        channels = [int(digits[i:i + 2], 16) / 255 for i in range(0, len(digits), 2)]
        alpha = channels[3] if len(channels) == 4 else None
        return (channels[0], channels[1], channels[2]), alpha

    func_match = _FUNC_RE.match(text)
    if func_match:
        name = func_match.group(1).lower()
        parts, alpha_token = _split_args(func_match.group(2))
        if name.startswith("rgb"):
            rgb = (_rgb_channel(parts[0]), _rgb_channel(parts[1]), _rgb_channel(parts[2]))
        else:
            rgb = _hsl_to_rgb(_hue(parts[0]), _percent(parts[1]), _percent(parts[2]))
        return rgb, _alpha(alpha_token)

    bare_match = _BARE_HSL_RE.match(text)
    if bare_match:
        hue, sat, light = bare_match.groups()
        return _hsl_to_rgb(_hue(hue), _percent(sat), _percent(light)), None

    if text.lower().startswith(("rgb", "hsl", "#")):
        raise ValueError(f"Malformed colour value: {value!r}")
    return None


# ---------------------------------------------------------------------------
# OKLCH conversion
# ---------------------------------------------------------------------------


def _srgb_to_linear(channel: float) -> float:
    if channel <= 0.04045:
        return channel / 12.92
    return ((channel + 0.055) / 1.055) ** 2.4


def _cbrt(x: float) -> float:
    return math.copysign(abs(x) ** (1 / 3), x)


def rgb_to_oklch(rgb: RGB) -> tuple[float, float, float]:
    """Convert gamma-encoded sRGB in ``[0, 1]`` to ``(L, C, H)``."""
    r, g, b = (_srgb_to_linear(c) for c in rgb)

    l_ = _cbrt(0.4122214708 * r + 0.5363325363 * g + 0.0514459929 * b)
    m_ = _cbrt(0.2119034982 * r + 0.6806995451 * g + 0.1073969566 * b)
    s_ = _cbrt(0.0883024619 * r + 0.2817188376 * g + 0.6299787005 * b)

    lightness = 0.2104542553 * l_ + 0.7936177850 * m_ - 0.0040720468 * s_
    a = 1.9779984951 * l_ - 2.4285922050 * m_ + 0.4505937099 * s_
    bb = 0.0259040371 * l_ + 0.7827717662 * m_ - 0.8086757660 * s_

    chroma = math.hypot(a, bb)
    hue = math.degrees(math.atan2(bb, a)) % 360
    return lightness, chroma, hue


def _fmt(number: float, places: int) -> str:
    text = f"{number:.{places}f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


def to_oklch(value: str) -> Optional[str]:
    """Render a CSS colour as ``oklch(L C H)``; ``None`` if *value* is not a colour.

    Achromatic colours (chroma below 1e-4) get a hue of ``0``.
    """
    parsed = parse_color(value)
    if parsed is None:
        return None
    rgb, alpha = parsed
    lightness, chroma, hue = rgb_to_oklch(rgb)
    if chroma < 1e-4:
        chroma, hue = 0.0, 0.0
    body = f"{_fmt(lightness, 4)} {_fmt(chroma, 4)} {_fmt(hue, 3)}"
    if alpha is not None and alpha < 1:
        body += f" / {_fmt(alpha * 100, 2)}%"
    return f"oklch({body})"


def convert_css_to_oklch(css: str) -> str:
    """Rewrite every colour-valued custom property of *css* to ``oklch()``.

    Selectors, ordering, comments and non-colour declarations are untouched.

    Raises:
        ValueError: A declaration looks like a colour but cannot be parsed.
    """

    def _replace(match: re.Match[str]) -> str:
        converted = to_oklch(match.group(2))
        if converted is None:
            return match.group(0)
        return f"{match.group(1)}{converted}{match.group(3)}"

    return _CUSTOM_PROPERTY_RE.sub(_replace, css)


# ---------------------------------------------------------------------------
# Fetching and resolution
# ---------------------------------------------------------------------------


async def fetch_theme(
    url: str,
    *,
    timeout: float = 30.0,
    client: Optional[httpx.AsyncClient] = None,
) -> str:
    """Download theme CSS from *url*.

    Raises:
        ThemeFetchError: Network failure or a non-2xx response.
    """
    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout, connect=10.0),
            follow_redirects=True,
        )
    try:
        response = await client.get(url)
        if response.status_code >= 400:
            raise ThemeFetchError(url, f"HTTP {response.status_code}: {response.reason_phrase}")
        return response.text
    except httpx.HTTPError as exc:
        raise ThemeFetchError(url, str(exc) or type(exc).__name__) from exc
    finally:
        if owns_client:
            await client.aclose()


async def resolve_theme(
    theme: Optional[ThemeSource],
    config: ScaffoldConfig,
    client: Optional[httpx.AsyncClient] = None,
) -> str:
    """Return the CSS block to put in place of the stylesheet's theme marker."""
    if theme is None:
        return DEFAULT_THEME
    if theme.kind == "css":
        return theme.content

    with step_status("Fetching theme..."):
        content = await fetch_theme(
            theme.content, timeout=config.theme_fetch_timeout, client=client
        )
    print_success("Theme fetched")

    if not config.convert_theme_to_oklch:
        return content
    try:
        converted = convert_css_to_oklch(content)
    except ValueError as exc:
        print_warning("OKLCH conversion failed, using raw theme CSS")
        print_dim(str(exc))
        return content
    print_success("Theme converted to OKLCH format")
    return converted

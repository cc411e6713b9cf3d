"""Scene model produced by the renderer, with SVG serialization."""

from __future__ import annotations

from dataclasses import dataclass
from html import escape
from typing import Literal


def _num(value: float) -> str:
    """Compact, stable number formatting for SVG attributes."""
    text = f"{value:.3f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


@dataclass(frozen=True, slots=True)
class Margin:
    top: int = 5
    right: int = 35
    bottom: int = 20
    left: int = 5


@dataclass(frozen=True, slots=True)
class Tick:
    position: float
    value: float
    label: str


@dataclass(frozen=True, slots=True)
class Axis:
    """An axis line with its ticks, translated along the opposite dimension by ``offset``."""

    orient: Literal["bottom", "right"]
    offset: float
    domain: tuple[float, float]
    range: tuple[float, float]
    ticks: tuple[Tick, ...]

    def to_svg(self) -> str:
        r0, r1 = self.range
        parts: list[str] = []
        if self.orient == "bottom":
            parts.append(f'<g class="axis axis-bottom" transform="translate(0,{_num(self.offset)})">')
            parts.append(f'<path class="domain" d="M{_num(r0)},6V0H{_num(r1)}V6"/>')
            for tick in self.ticks:
                parts.append(
                    f'<g class="tick" transform="translate({_num(tick.position)},0)">'
                    f'<line y2="6"/><text y="9" dy="0.71em" text-anchor="middle">{escape(tick.label)}</text></g>'
                )
        else:
            parts.append(f'<g class="axis axis-right" transform="translate({_num(self.offset)},0)">')
            parts.append(f'<path class="domain" d="M6,{_num(r0)}H0V{_num(r1)}H6"/>')
            for tick in self.ticks:
                parts.append(
                    f'<g class="tick" transform="translate(0,{_num(tick.position)})">'
                    f'<line x2="6"/><text x="9" dy="0.32em" text-anchor="start">{escape(tick.label)}</text></g>'
                )
        parts.append("</g>")
        return "".join(parts)


@dataclass(frozen=True, slots=True)
class Polyline:
    points: tuple[tuple[float, float], ...]

    @property
    def path(self) -> str:
        if not self.points:
            return ""
        head, *rest = self.points
        return f"M{_num(head[0])},{_num(head[1])}" + "".join(f"L{_num(x)},{_num(y)}" for x, y in rest)


@dataclass(frozen=True, slots=True)
class Label:
    css_class: str
    x: float
    y: float
    text: str

    def to_svg(self) -> str:
        return (
            f'<text class="{self.css_class}" x="{_num(self.x)}" y="{_num(self.y)}" '
            f'text-anchor="end">{escape(self.text)}</text>'
        )


@dataclass(frozen=True, slots=True)
class Scene:
    """Complete visual state of one chart at one point in time."""

    name: str
    width: int
    height: int
    now: int
    x_axis: Axis
    y_axis: Axis
    line: Polyline
    value_label: Label
    title_label: Label

    def to_svg(self) -> str:
        return (
            f'<svg class="graph" xmlns="http://www.w3.org/2000/svg" '
            f'viewBox="0 0 {self.width} {self.height}" data-metric="{escape(self.name)}">'
            f"{self.value_label.to_svg()}"
            f"{self.title_label.to_svg()}"
            f'<path class="line" fill="none" d="{self.line.path}"/>'
            f"{self.x_axis.to_svg()}"
            f"{self.y_axis.to_svg()}"
            "</svg>"
        )

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator
import xml.etree.ElementTree as ET


@dataclass
class ChartContainer:
    """A block element of the hosting page with a measured pixel size."""

    element: ET.Element
    offset_width: int
    offset_height: int

    def __post_init__(self) -> None:
        self._check_size(self.offset_width, self.offset_height)

    def resize(self, width: int, height: int) -> None:
        self._check_size(width, height)
        self.offset_width = int(width)
        self.offset_height = int(height)

    @staticmethod
    def _check_size(width: int, height: int) -> None:
        if width < 0 or height < 0:
            raise ValueError("container width/height must be >= 0")

    @property
    def classes(self) -> tuple[str, ...]:
        return tuple(self.element.attrib.get("class", "").split())


class HostDocument:
    """Minimal page model: a body of sized containers the chart mounts into."""

    def __init__(self, title: str = "Unemployment rate") -> None:
        self.title = title
        self._html = ET.Element("html", {"lang": "en"})
        head = ET.SubElement(self._html, "head")
        ET.SubElement(head, "meta", {"charset": "utf-8"})
        ET.SubElement(head, "title").text = title
        self._style = ET.SubElement(head, "style")
        self._body = ET.SubElement(self._html, "body")
        self._containers: list[ChartContainer] = []

    def add_container(self, *, class_name: str = "chart", width: int, height: int, element_id: str | None = None) -> ChartContainer:
        attrs = {"class": class_name}
        if element_id:
            attrs["id"] = element_id
        element = ET.SubElement(self._body, "div", attrs)
        container = ChartContainer(element=element, offset_width=int(width), offset_height=int(height))
        self._containers.append(container)
        return container

    def containers(self) -> Iterator[ChartContainer]:
        return iter(self._containers)

    def query_selector(self, selector: str) -> ChartContainer | None:
        selector = selector.strip()
        if not selector:
            raise ValueError("selector must be non-empty")
        for container in self._containers:
            if _matches(container, selector):
                return container
        return None

    def set_stylesheet(self, css: str) -> None:
        self._style.text = css

    def to_html(self) -> str:
        for container in self._containers:
            container.element.set(
                "style", f"width:{container.offset_width}px;height:{container.offset_height}px"
            )
        return "<!DOCTYPE html>\n" + ET.tostring(self._html, encoding="unicode", method="html")


def _matches(container: ChartContainer, selector: str) -> bool:
    if selector.startswith("."):
        return selector[1:] in container.classes
    if selector.startswith("#"):
        return container.element.attrib.get("id") == selector[1:]
    return container.element.tag == selector

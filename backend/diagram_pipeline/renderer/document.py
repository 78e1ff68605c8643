"""
Shared document model.

A ``SharedDocument`` is the page the diagram lives in: an ElementTree that
several parties mutate concurrently (the render controller mounting SVG, the
rendering engine injecting its own nodes, the janitor removing them). Every
mutation goes through the document so it can be locked and observed.
"""

import threading
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from diagram_pipeline.renderer.sanitizer import parse_svg


@dataclass
class MutationRecord:
    kind: str  # "added" | "removed"
    target: ET.Element
    nodes: List[ET.Element] = field(default_factory=list)


MutationCallback = Callable[[MutationRecord], None]


class SharedDocument:
    def __init__(self, root: Optional[ET.Element] = None):
        self.root = root if root is not None else ET.Element("body")
        self._lock = threading.RLock()
        self._listeners: List[MutationCallback] = []

    # -------------------------
    # Queries
    # -------------------------
    def _parents(self) -> Dict[ET.Element, ET.Element]:
        return {child: parent for parent in self.root.iter() for child in parent}

    def parent_of(self, element: ET.Element) -> Optional[ET.Element]:
        with self._lock:
            return self._parents().get(element)

    def contains(self, element: ET.Element, within: Optional[ET.Element] = None) -> bool:
        scope = within if within is not None else self.root
        with self._lock:
            return any(e is element for e in scope.iter())

    def find_all(self, predicate, within: Optional[ET.Element] = None) -> List[ET.Element]:
        """Snapshot of matching elements below ``within`` (the whole document by default)."""
        scope = within if within is not None else self.root
        with self._lock:
            return [e for e in scope.iter() if e is not scope and predicate(e)]

    def get_by_id(self, element_id: str) -> Optional[ET.Element]:
        with self._lock:
            return next((e for e in self.root.iter() if e.get("id") == element_id), None)

    # -------------------------
    # Mutations
    # -------------------------
    def append(self, parent: ET.Element, element: ET.Element) -> ET.Element:
        with self._lock:
            parent.append(element)
        self._notify(MutationRecord("added", parent, [element]))
        return element

    def remove(self, element: ET.Element) -> bool:
        """Detach ``element``. Returns False when it is no longer in the document."""
        with self._lock:
            parent = self._parents().get(element)
            if parent is None:
                return False
            parent.remove(element)
        self._notify(MutationRecord("removed", parent, [element]))
        return True

    def replace_children(self, parent: ET.Element, children: List[ET.Element]) -> None:
        with self._lock:
            removed = list(parent)
            for child in removed:
                parent.remove(child)
            parent.extend(children)
        if removed:
            self._notify(MutationRecord("removed", parent, removed))
        if children:
            self._notify(MutationRecord("added", parent, list(children)))

    # -------------------------
    # Observation
    # -------------------------
    def subscribe(self, callback: MutationCallback) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._listeners:
                    self._listeners.remove(callback)

        return unsubscribe

    def _notify(self, record: MutationRecord) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            listener(record)

    def create_view(self, view_id: str, parent: Optional[ET.Element] = None) -> "DiagramView":
        container = ET.Element("div", {"id": view_id, "class": "mermaid"})
        self.append(parent if parent is not None else self.root, container)
        return DiagramView(self, container)


class DiagramView:
    """The container a diagram is mounted into."""

    def __init__(self, document: SharedDocument, container: ET.Element):
        self.document = document
        self.container = container
        self.latest_render_id: Optional[str] = None
        self._janitor = None

    @property
    def children(self) -> List[ET.Element]:
        return list(self.container)

    @property
    def janitor(self):
        """The ErrorNodeJanitor owned by this view, created on first use."""
        if self._janitor is None:
            from diagram_pipeline.renderer.janitor import ErrorNodeJanitor

            self._janitor = ErrorNodeJanitor(self)
        return self._janitor

    def watch(self):
        """Start the view's janitor if it is not running yet."""
        return self.janitor.start()

    def close(self) -> None:
        """Discard the view: its janitor stops sweeping."""
        if self._janitor is not None:
            self._janitor.stop()

    def mount(self, svg_markup: str) -> ET.Element:
        root = parse_svg(svg_markup)
        self.document.replace_children(self.container, [root])
        return root

    def clear(self) -> None:
        self.document.replace_children(self.container, [])

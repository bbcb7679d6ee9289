"""Document access helpers and the node-insertion mutation feed.

Two capabilities over a BeautifulSoup tree live here so that neither the
parser nor the coordinator couples to the tree's shape:

  - ``section_texts(node)`` walks upward from a cell and yields the text of
    the surrounding elements, nearest first, for year inference.
  - ``MutationFeed`` performs node insertions and reports them to
    subscribers, the way a DOM MutationObserver reports ``childList``
    records.  Every actor that edits the document (the augmentor included)
    goes through it, which is what lets the coordinator tell its own writes
    apart from everyone else's.
"""

import logging
from collections.abc import Callable, Iterator

from bs4 import BeautifulSoup
from bs4.element import PageElement, Tag

logger = logging.getLogger(__name__)

MutationCallback = Callable[[list[PageElement]], None]


# ─── Section Walk ────────────────────────────────────────────────────────────


def _stops_walk(node: Tag | None) -> bool:
    """The walk ends at <body> or at the document root."""
    return node is None or isinstance(node, BeautifulSoup) or node.name == "body"


def section_texts(node: Tag | None) -> Iterator[str]:
    """Yield the text of preceding element siblings, level by level up to <body>.

    At each level the siblings are visited nearest first; then the walk moves
    to the parent and repeats.  The generator is lazy so callers can stop at
    the first useful hit.
    """
    current = node
    while not _stops_walk(current):
        for sibling in current.previous_siblings:
            if isinstance(sibling, Tag):
                yield sibling.get_text().strip()
        current = current.parent


# ─── Mutation Feed ───────────────────────────────────────────────────────────


class MutationFeed:
    """Insertion API over a BeautifulSoup document that notifies subscribers.

    Subscribers are called synchronously, after the insertion, with the list
    of nodes that were added.
    """

    def __init__(self, soup: BeautifulSoup):
        self.soup = soup
        self._subscribers: list[MutationCallback] = []

    def subscribe(self, callback: MutationCallback) -> None:
        """Register *callback* for every future insertion."""
        self._subscribers.append(callback)

    def unsubscribe(self, callback: MutationCallback) -> None:
        """Stop notifying *callback* (no-op if it was never subscribed)."""
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def new_tag(self, name: str, attrs: dict[str, str] | None = None, string: str | None = None) -> Tag:
        """Create a detached tag owned by this document."""
        tag = self.soup.new_tag(name, attrs=attrs or {})
        if string is not None:
            tag.string = string
        return tag

    def append(self, parent: Tag, node: PageElement) -> PageElement:
        """Append *node* as the last child of *parent*."""
        parent.append(node)
        self._notify([node])
        return node

    def insert(self, parent: Tag, index: int, node: PageElement) -> PageElement:
        """Insert *node* at child position *index* of *parent*."""
        parent.insert(index, node)
        self._notify([node])
        return node

    def insert_after(self, ref: PageElement, node: PageElement) -> PageElement:
        """Insert *node* immediately after *ref*."""
        ref.insert_after(node)
        self._notify([node])
        return node

    def _notify(self, added: list[PageElement]) -> None:
        for callback in list(self._subscribers):
            callback(added)

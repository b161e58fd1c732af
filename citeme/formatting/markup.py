"""Typed markup tree for the rich-text surface.

The formatter builds documents out of these nodes and serialises them once,
so no transformation ever re-parses its own output.
"""
from dataclasses import dataclass, field
from html import escape
from typing import List, Optional, Union

ANNOTATION_CLASS = "citation-marker"
HIGHLIGHT_CLASS = "new-citation"
ENTRY_CLASS = "bibliography-entry"

ANNOTATION_STYLE = "background-color: #fff8c5; border-bottom: 1px solid #f0c808;"
HIGHLIGHT_STYLE = "background-color: #e3f2fd;"

# Elements a rich-text editor produces. Anything else in angle brackets,
# such as <https://doi.org/...> or <name@uni.edu>, is plain text.
MARKUP_TAGS = [
    "p", "div", "span", "br", "em", "strong", "b", "i", "u", "mark", "a",
    "sup", "sub", "blockquote", "pre", "code", "section",
    "ul", "ol", "li", "table", "tr", "td", "th",
    "h1", "h2", "h3", "h4", "h5", "h6",
]


@dataclass
class Text:
    text: str

    def plain(self) -> str:
        return self.text

    def render(self) -> str:
        return escape(self.text, quote=False)


@dataclass
class Emphasis:
    """Italic (``em``) or bold (``strong``) run."""

    children: List["Inline"]
    tag: str = "em"

    def plain(self) -> str:
        return "".join(child.plain() for child in self.children)

    def render(self) -> str:
        return f"<{self.tag}>{render_inline(self.children)}</{self.tag}>"


@dataclass
class Annotation:
    """Inline span carrying a class, a style and an optional hover title."""

    children: List["Inline"]
    css_class: str = ANNOTATION_CLASS
    style: str = ANNOTATION_STYLE
    title: Optional[str] = None

    def plain(self) -> str:
        return "".join(child.plain() for child in self.children)

    def render(self) -> str:
        attrs = f'class="{self.css_class}" style="{escape(self.style)}"'
        if self.title:
            attrs += f' title="{escape(self.title)}"'
        return f"<span {attrs}>{render_inline(self.children)}</span>"


Inline = Union[Text, Emphasis, Annotation]


@dataclass
class Heading:
    children: List[Inline]
    level: int = 3

    def render(self) -> str:
        return f"<h{self.level}>{render_inline(self.children)}</h{self.level}>"


@dataclass
class Paragraph:
    children: List[Inline]
    css_class: Optional[str] = None

    def render(self) -> str:
        attrs = f' class="{self.css_class}"' if self.css_class else ""
        return f"<p{attrs}>{render_inline(self.children)}</p>"


Block = Union[Heading, Paragraph]


@dataclass
class Document:
    blocks: List[Block] = field(default_factory=list)

    def append(self, block: Block) -> None:
        self.blocks.append(block)

    def render(self) -> str:
        return "".join(block.render() for block in self.blocks)


def render_inline(nodes: List[Inline]) -> str:
    return "".join(node.render() for node in nodes)


def plain_text(nodes: List[Inline]) -> str:
    return "".join(node.plain() for node in nodes)


def highlight(children: List[Inline]) -> Annotation:
    """Wrap a sentence in the "newly added citation" highlight span."""
    return Annotation(children, css_class=HIGHLIGHT_CLASS, style=HIGHLIGHT_STYLE)

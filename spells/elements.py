from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass
class Element:
    """A node of the document tree, between parsing and HTML generation."""
    tag_name: str
    source_file: str
    attributes: Dict[str, str] = field(default_factory=dict)
    classes: List[str] = field(default_factory=list)
    id: Optional[str] = None
    inner_text: Optional[str] = None
    children: List['Element'] = field(default_factory=list)
    single_tag: bool = False
    not_markdown: bool = False
    multiline: bool = False
    line: int = 0
    column: int = 0

    def find_child(self, tag_name: str) -> Optional['Element']:
        """First direct child with the given tag name."""
        return next((c for c in self.children if c.tag_name == tag_name), None)

    @property
    def position(self) -> str:
        return f"{self.line}:{self.column}" if self.line else ''


def unquote(value: str) -> str:
    """Strips one layer of quotes, if there is one."""
    if len(value) > 1 and value[0] in '"\'' and value[-1] == value[0]:
        return value[1:-1]
    return value

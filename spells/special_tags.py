import re

# Tags whose text is never run through Markdown
NO_MARKDOWN_TAGS = ['style', 'css', 'script']

# Tags that are moved into <head> wherever they are written
HEAD_TAGS = ['title', 'css', 'style', 'meta', 'link']

# Tags without a closing tag. Giving one of them text or children still closes it.
SINGLE_TAGS = ['meta', 'wbr', 'br']

# Attributes holding URLs, rewritten when a file is imported from another directory
LINK_ATTRIBUTES = [
    re.compile(r'^src$'),
    re.compile(r'^href$'),
    re.compile(r'^data-'),
]

IMPORT_TAGS = [
    '@import', '@imports',
    '@require', '@requires',
    '@include', '@includes',
    '@need', '@needs',
    '@want', '@wants',
    '@desire', '@desires',
    '@necessitate', '@necessitates',
    '@steal-code-from', '@steals-code-from',
]

# Attribute that turns a tag into a component definition
COMPONENT_MARKER = '@'

DOCTYPE = '!DOCTYPE html'


def is_link_attribute(name: str) -> bool:
    return any(pattern.match(name) for pattern in LINK_ATTRIBUTES)

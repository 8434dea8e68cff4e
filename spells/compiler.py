import logging
from typing import List, Optional

from . import paths
from .errors import FatalCompileError
from .generator import generate
from .options import CompileOptions
from .parser import parse
from .scripts import ScriptCompiler, default_script_compiler
from .transform import Reader, assemble

logger = logging.getLogger(__name__)


class SpellsCompiler:
    """
    Spells Compiler
    Compiles Spells (.spl) source code to HTML.

    Features:
    - Indentation-based hierarchy (tabs, or spaces detected from the first indented line)
    - Classes, ids and attributes right after the tag name: `a.big#home(href=index.html)`
    - Multiline text blocks (`p.`)
    - Imports of other .spl files (`@import`, `@include`, ...), with links remapped
    - Components: define with `name(@)`, use with `name`
    - `@{variable}` substitution from the attributes of enclosing tags
    - Markdown in text, TypeScript in `script` tags
    - Title, meta, link and style tags are moved into <head>

    After `compile`, `script_sources` holds the external scripts the page refers to.
    """

    def __init__(self, script_compiler: Optional[ScriptCompiler] = None,
                 read_text: Reader = paths.read_text):
        self.script_compiler = script_compiler or default_script_compiler
        self.read_text = read_text
        self.script_sources: List[str] = []

    async def compile(self, source: str, options: CompileOptions) -> str:
        """
        Compiles Spells source code to HTML. Syntax errors and failed imports are
        raised; any other error is logged and gives an empty page.
        """
        self.script_sources = []
        try:
            elements = parse(source, options)[0]
            result = await assemble(elements, options, self.script_compiler, self.read_text)
            self.script_sources = result.script_sources
            return generate(result.elements)
        except FatalCompileError:
            raise
        except Exception:
            logger.exception("Tried compiling %s:\n%s", options.file_path, source)
            return ''

    async def compile_file(self, path: str, convert_script_extension_to_js: bool = False,
                           final: bool = False) -> str:
        """Reads and compiles one root file."""
        source = await self.read_text(path)
        options = CompileOptions(path, convert_script_extension_to_js=convert_script_extension_to_js,
                                 final=final)
        return await self.compile(source, options)


async def compile(source: str, options: CompileOptions) -> str:
    """Compiles Spells source code with a throwaway compiler."""
    return await SpellsCompiler().compile(source, options)

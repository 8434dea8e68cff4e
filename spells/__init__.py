from .compiler import SpellsCompiler, compile
from .elements import Element
from .errors import (ConfigError, FatalCompileError, ScriptCompileError, SpellsError,
                     SpellsImportError, SpellsSyntaxError)
from .generator import generate
from .options import CompileOptions
from .parser import parse
from .scripts import ScriptCompiler
from .transform import assemble, crawl, modify

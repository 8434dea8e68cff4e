class SpellsError(Exception):
    """Base class for everything the compiler raises on purpose."""


class FatalCompileError(SpellsError):
    """Aborts the whole compile instead of producing an empty page."""


class SpellsSyntaxError(FatalCompileError, ValueError):
    def __init__(self, message: str, file_path: str = '', position: str = ''):
        self.file_path = file_path
        self.position = position
        location = ':'.join(p for p in (file_path, position) if p)
        super().__init__(f"Spells Compile Error ({location}): {message}" if location
                         else f"Spells Compile Error: {message}")


class SpellsImportError(FatalCompileError):
    pass


class ScriptCompileError(SpellsError):
    pass


class ConfigError(SpellsError, ValueError):
    pass

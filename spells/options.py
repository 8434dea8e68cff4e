from dataclasses import dataclass, replace
from typing import Optional


@dataclass(frozen=True)
class CompileOptions:
    # The file that's currently being compiled
    file_path: str
    # Rewrite `script(src=*.ts)` to point at the compiled `.js` file
    convert_script_extension_to_js: bool = False
    # The root file that the output is written for; set while compiling imports
    path_remap_target: Optional[str] = None
    # Minify inline scripts and leave out source maps
    final: bool = False

    def for_import(self, file_path: str) -> 'CompileOptions':
        """Options for a file imported into this one."""
        return replace(self, file_path=file_path,
                       path_remap_target=self.path_remap_target or self.file_path)

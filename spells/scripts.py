import asyncio
import logging
import shutil
from typing import Awaitable, Callable, List, Optional

from .errors import ScriptCompileError

logger = logging.getLogger(__name__)

Transform = Callable[[str, Optional[str], bool], Awaitable[str]]

UNINITIALIZED = 0
INITIALIZING = 1
READY = 2


async def _passthrough(source: str, file_name: Optional[str] = None, minify: bool = False) -> str:
    return source


class ScriptCompiler:
    """
    Compiles TypeScript (inline `script` bodies and external sources) to JavaScript
    with esbuild. The compiler is located the first time it's needed; everybody who
    asks while that is happening waits for the same initialization.
    """

    def __init__(self, executable: str = 'esbuild', target: str = 'es2022',
                 loader: Optional[Callable[[], Awaitable[Transform]]] = None):
        self.executable = executable
        self.target = target
        self.state = UNINITIALIZED
        self._loader = loader or self._load_esbuild
        self._transform: Transform = _passthrough
        self._ready: Optional[asyncio.Event] = None

    async def start(self) -> None:
        """Initializes the compiler once. Safe to call any number of times."""
        if self.state == READY:
            return
        if self.state == INITIALIZING:
            await self._ready.wait()
            if self.state != READY:
                raise ScriptCompileError("Script compiler failed to start")
            return

        self.state = INITIALIZING
        self._ready = asyncio.Event()
        try:
            self._transform = await self._loader()
        except Exception:
            self.state = UNINITIALIZED
            raise
        else:
            self.state = READY
            logger.info("Script compiler loaded!")
        finally:
            self._ready.set()

    async def compile(self, source: str, file_name: Optional[str] = None, minify: bool = False) -> str:
        """
        Compiles one script. A `file_name` adds an inline source map pointing at it;
        `minify` shrinks the output.
        """
        await self.start()
        return await self._transform(source, file_name, minify)

    async def _load_esbuild(self) -> Transform:
        path = await asyncio.to_thread(shutil.which, self.executable)
        if path is None:
            logger.warning("%s not found, scripts will be copied without compiling.", self.executable)
            return _passthrough

        process = await asyncio.create_subprocess_exec(
            path, '--version',
            stdout=asyncio.subprocess.PIPE, stderr=asyncio.subprocess.PIPE)
        version, _ = await process.communicate()
        if process.returncode != 0:
            raise ScriptCompileError(f"Could not start {path}")
        logger.debug("Using %s %s", path, version.decode().strip())

        async def transform(source: str, file_name: Optional[str] = None, minify: bool = False) -> str:
            return await self._run_esbuild(path, source, file_name, minify)

        return transform

    def _esbuild_arguments(self, file_name: Optional[str], minify: bool) -> List[str]:
        args = ['--loader=tsx', f'--target={self.target}']
        if minify:
            args += ['--minify', '--drop:console', '--drop:debugger', '--keep-names']
        if file_name:
            args += ['--sourcemap=inline', f'--sourcefile={file_name}']
        return args

    async def _run_esbuild(self, path: str, source: str, file_name: Optional[str], minify: bool) -> str:
        process = await asyncio.create_subprocess_exec(
            path, *self._esbuild_arguments(file_name, minify),
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE)
        out, err = await process.communicate(source.encode())
        if process.returncode != 0:
            raise ScriptCompileError(err.decode().strip() or f"esbuild exited with {process.returncode}")
        return out.decode()


default_script_compiler = ScriptCompiler()

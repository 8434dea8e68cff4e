import asyncio
import logging
import re
from pathlib import Path
from typing import Optional

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from .compiler import SpellsCompiler
from .config import BuildConfig
from .errors import SpellsError

logger = logging.getLogger(__name__)

_EXTERNAL = re.compile(r'^(?:[a-zA-Z][a-zA-Z0-9+.-]*:|/)')


async def build_script(src: Path, dst: Path, script: str, config: BuildConfig,
                       compiler: SpellsCompiler) -> None:
    """Compiles a script a page refers to, next to the page's output file."""
    if _EXTERNAL.match(script):
        return
    script_src = src.parent / script
    script_dst = (dst.parent / script).with_suffix('.js')
    code = script_src.read_text(encoding='utf-8')
    file_name = None if config.final else script_src.as_posix()
    compiled = await compiler.script_compiler.compile(code, file_name, minify=config.final)
    script_dst.parent.mkdir(parents=True, exist_ok=True)
    script_dst.write_text(compiled, encoding='utf-8')
    logger.info("Wrote %s", script_dst)


async def build(config: BuildConfig, compiler: SpellsCompiler) -> None:
    for (src, dst) in config.write_pairs.items():
        html = await compiler.compile_file(
            src.as_posix(),
            convert_script_extension_to_js=config.convert_script_extension_to_js,
            final=config.final,
        )
        dst.parent.mkdir(parents=True, exist_ok=True)
        dst.write_text(html, encoding='utf-8')
        logger.info("Wrote %s", dst)
        for script in compiler.script_sources:
            await build_script(src, dst, script, config, compiler)


def trigger_recompile(config: BuildConfig, compiler: SpellsCompiler):
    try:
        asyncio.run(build(config, compiler))
    except (SpellsError, OSError) as e:
        logger.error("%s", e)


class ChangeHandler(FileSystemEventHandler):
    def __init__(self, files_to_watch, config: BuildConfig, compiler: Optional[SpellsCompiler] = None):
        self.files_to_watch = {x.resolve() for x in files_to_watch}  # absolute paths (sources + watched)
        self.config = config
        self.compiler = compiler or SpellsCompiler()
        logger.info("Handler initialized. Monitoring for changes...")

    def on_modified(self, event):
        if event.is_directory:
            return

        src_path_abs = Path(event.src_path).resolve()
        if src_path_abs in self.files_to_watch:
            logger.info("Detected modification in: %s", src_path_abs)
            trigger_recompile(self.config, self.compiler)


def run_watcher(config: BuildConfig, compiler: Optional[SpellsCompiler] = None):
    """Builds once, then rebuilds whenever a source or watched file changes."""
    files_to_watch = set(config.write_pairs.keys()) | config.watch_paths
    dirs_to_watch = {p.resolve().parent for p in files_to_watch}

    if not dirs_to_watch:
        logger.error("No valid directories provided to watch.")
        return

    event_handler = ChangeHandler(files_to_watch, config, compiler)
    trigger_recompile(config, event_handler.compiler)
    observer = Observer()

    scheduled_count = 0
    for dir_path in dirs_to_watch:
        if not dir_path.is_dir():
            logger.warning("Directory '%s' does not exist. Cannot watch.", dir_path)
            continue

        # only the directory itself, not its subdirectories
        observer.schedule(event_handler, str(dir_path), recursive=False)
        scheduled_count += 1
        logger.info("Scheduled watcher for directory: %s", dir_path)

    if scheduled_count == 0:
        logger.error("No watchers were successfully scheduled. Exiting.")
        return

    observer.start()
    logger.info("Watching for file changes in %d director%s. Press Ctrl+C to stop.",
                scheduled_count, 'y' if scheduled_count == 1 else 'ies')

    try:
        while observer.is_alive():
            observer.join(timeout=1)
    except KeyboardInterrupt:
        logger.info("Stopping watcher (Ctrl+C pressed)...")
    finally:
        if observer.is_alive():
            observer.stop()
        observer.join()
        logger.info("Watcher stopped completely.")

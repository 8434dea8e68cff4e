import asyncio
from pathlib import Path
from typing import List


def go_up_one_level(path: str) -> str:
    """
    Returns the directory that contains `path`, always ending in a slash.

    `some/dir/file.spl` -> `some/dir/`
    `some/dir/`         -> `some/dir/`
    `file.spl`          -> `./`
    """
    parts = path.split('/')[:-1]
    if not parts:
        return './'
    return '/'.join(parts) + '/'


def normalize(path: str) -> str:
    """
    Resolves `.` and `..` segments, e.g. `some/path/that/../goes/../here` becomes
    `some/path/here`. A `..` with nothing left to pop stays at the front.
    """
    kept: List[str] = []
    back = 0
    for part in path.split('/'):
        if part == '..':
            if kept:
                kept.pop()
            else:
                back += 1
        elif part == '.' or not part:
            continue
        else:
            kept.append(part)

    return ('/' if path.startswith('/') else '') + '../' * back + '/'.join(kept)


def _segments(path: str) -> List[str]:
    if not path:
        return []
    return path.split('/')


def relative_from(from_dir: str, to: str) -> str:
    """Path that leads from directory `from_dir` to `to` (a file or a directory)."""
    from_dir = normalize(from_dir)
    to = normalize(to)
    if from_dir == to:
        return ''

    from_parts = _segments(from_dir)
    to_parts = _segments(to)

    common = 0
    while common < len(from_parts) and common < len(to_parts) \
            and from_parts[common] == to_parts[common]:
        common += 1

    out_parts = ['..'] * (len(from_parts) - common) + to_parts[common:]
    return '/'.join(out_parts)


async def read_text(path: str) -> str:
    """Reads a text file without blocking the event loop."""
    return await asyncio.to_thread(Path(normalize(path)).read_text, encoding='utf-8')

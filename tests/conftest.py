import pytest

from spells.scripts import ScriptCompiler


class FakeFiles:
    """In-memory replacement for the file reader."""

    def __init__(self, files):
        self.files = files
        self.reads = []

    async def __call__(self, path):
        self.reads.append(path)
        if path not in self.files:
            raise FileNotFoundError(path)
        return self.files[path]


def make_fake_script_compiler():
    async def loader():
        async def transform(source, file_name=None, minify=False):
            return f"/*{file_name}|{minify}*/{source}"
        return transform
    return ScriptCompiler(loader=loader)


@pytest.fixture
def script_compiler():
    return make_fake_script_compiler()


@pytest.fixture
def fake_files():
    return FakeFiles

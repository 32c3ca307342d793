import io
import sys
import textwrap
from types import SimpleNamespace

import pytest

from pipesh import HistoryStore, Shell


@pytest.fixture
def bin_dir(tmp_path):
    path = tmp_path / "bin"
    path.mkdir()
    return path


@pytest.fixture
def make_script(bin_dir):
    """Write an executable Python script onto the test search path."""

    def factory(name: str, body: str, *, directory=None):
        target = (directory or bin_dir) / name
        target.write_text(f"#!{sys.executable}\n" + textwrap.dedent(body))
        target.chmod(0o755)
        return target

    return factory


@pytest.fixture
def scripts(make_script):
    make_script(
        "upper",
        """
        import sys
        sys.stdout.buffer.write(sys.stdin.buffer.read().upper())
        """,
    )
    make_script(
        "rev",
        """
        import sys
        for line in sys.stdin.buffer:
            sys.stdout.buffer.write(line.rstrip(b"\\n")[::-1] + b"\\n")
        """,
    )
    make_script(
        "count",
        """
        import sys
        print(len(sys.stdin.buffer.read()))
        """,
    )
    make_script(
        "emit",
        """
        import sys
        sys.stdout.buffer.write(b"x" * int(sys.argv[1]))
        """,
    )
    make_script(
        "fail",
        """
        import sys
        sys.stderr.write("failing\\n")
        sys.exit(int(sys.argv[1]))
        """,
    )


@pytest.fixture
def streams():
    return SimpleNamespace(stdin=io.BytesIO(), stdout=io.BytesIO(), stderr=io.BytesIO())


@pytest.fixture
def shell(bin_dir, streams) -> Shell:
    return Shell(
        search_path=[str(bin_dir)],
        history=HistoryStore(),
        stdin=streams.stdin,
        stdout=streams.stdout,
        stderr=streams.stderr,
    )

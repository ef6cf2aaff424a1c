"""Pytest configuration and fixtures."""

import pytest
from pathlib import Path
import tempfile


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_trace():
    """Two connections sharing params; B executes a name it never prepared."""
    return (
        "1,conn-a,connect,10,ok,user,app,database,shop,host,db1,port,5432,prog,billing\n"
        "1,conn-b,connect,8,ok,user,app,database,shop,host,db1,port,5432,prog,reports\n"
        '1,conn-a,prepare,5,ok,query,SELECT 1,name,p1\n'
        "1,conn-a,execute,20,ok,name,p1\n"
        "1,conn-b,execute,7,ok,name,p1\n"
        "1,conn-a,close,2,ok\n"
    )


@pytest.fixture
def mixed_version_trace():
    """Version-1 rows interleaved with rows of other versions."""
    return (
        "2,conn-a,connect,99,ok,whatever\n"
        "1,conn-a,connect,3,ok,user,u,database,d,host,h,port,1,prog,p\n"
        "\n"
        "0,conn-a,ping,1000,ok\n"
        "1,conn-a,ping,4,ok\n"
        "1\n"
    )


@pytest.fixture
def write_trace(temp_dir):
    """Write trace text to a file and return its path."""
    def _write(content: str, name: str = "trace.csv") -> Path:
        path = temp_dir / name
        path.write_text(content, encoding="utf-8")
        return path
    return _write


@pytest.fixture
def scratch_dir(temp_dir):
    """Parent directory for partitioner buckets."""
    path = temp_dir / "scratch"
    path.mkdir()
    return path

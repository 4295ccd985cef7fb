# Ensure `import hairforge` works from a fresh clone without a prior install:
# put repo/python on sys.path.
import sys
from pathlib import Path

import numpy as np
import pytest


def _repo_root() -> Path:
    return Path(__file__).resolve().parents[1]


def _ensure_python_path():
    pkg_dir = _repo_root() / "python"
    if str(pkg_dir) not in sys.path:
        sys.path.insert(0, str(pkg_dir))


_ensure_python_path()


@pytest.fixture
def rng():
    return np.random.default_rng(1234)

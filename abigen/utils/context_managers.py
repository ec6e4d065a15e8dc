from contextlib import contextmanager
from os import chdir
from pathlib import Path
from typing import Union


@contextmanager
def change_cwd(path: Union[str, Path]):
    """
    Temporarily change the current working directory so that relative paths in a config file
    resolve against the directory of that file.
    """
    orig_cwd = Path.cwd().resolve()
    try:
        chdir(Path(path).resolve())
        yield
    finally:
        chdir(orig_cwd)

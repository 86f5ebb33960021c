import errno
import os
from pathlib import Path
from typing import Union


def silent_remove(file_path: Union[str, Path]) -> None:
    """
    Remove file which may not exist.

    :param file_path: File path.
    :type file_path: str
    :returns: None
    :rtype: :class:`NoneType`
    """
    try:
        os.remove(file_path)
    except OSError as e:
        if e.errno != errno.ENOENT:  # errno.ENOENT = no such file or directory
            raise


def get_file_name_with_ext(path: Union[str, Path]) -> str:
    """
    Extracts file name with ext from a given path.

    :param path: Path to file.
    :type path: str
    :returns: File name with extension
    :rtype: :class:`str`
    :Usage example:

     .. code-block::

        from algoclient.io.fs import get_file_name_with_ext

        print(get_file_name_with_ext("/home/admin/robots/T-800.png"))
        # Output: T-800.png
    """
    return os.path.basename(path)


def ensure_base_path(path: Union[str, Path]) -> None:
    """Creates the parent directory of ``path`` if it does not exist."""
    dst_dir = os.path.dirname(os.path.abspath(path))
    os.makedirs(dst_dir, exist_ok=True)

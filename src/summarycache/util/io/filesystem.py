"""
File system utilities.

Provides content hashing and an atomic text write used for cache
containers: the data is written to a temporary file in the destination
directory and renamed over the destination, so readers observe either the
previous file or the complete new one.
"""
import hashlib
import os
import tempfile


def ensureDirectoryExists(dirname):
    """
    Ensure that a directory exists, creating it if necessary.

    Args:
        dirname: Path to the directory to ensure exists
    """
    if dirname and not os.path.exists(dirname):
        os.makedirs(dirname, exist_ok=True)


def dataHash(s):
    """
    Compute the SHA-256 hex digest of data.

    Args:
        s: Data to hash (bytes)

    Returns:
        str: Hex digest
    """
    h = hashlib.sha256()
    h.update(s)
    return h.hexdigest()


def readText(path):
    """
    Read a whole text file as UTF-8.

    Args:
        path: File to read

    Returns:
        str: File contents
    """
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def writeTextAtomic(path, data):
    """
    Replace the contents of path with data in a single atomic step.

    The parent directory is created if missing. On failure the temporary
    file is removed and the exception is re-raised; the destination is left
    untouched.

    Args:
        path: Destination file
        data: Text to write (encoded as UTF-8)
    """
    path = os.fspath(path)
    directory = os.path.dirname(os.path.abspath(path))
    ensureDirectoryExists(directory)

    fd, tmpPath = tempfile.mkstemp(
        dir=directory, prefix=".%s." % os.path.basename(path), suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(data)
        os.replace(tmpPath, path)
    except BaseException:
        try:
            os.unlink(tmpPath)
        except FileNotFoundError:
            pass
        raise

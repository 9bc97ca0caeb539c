"""Encode a finished Profile and persist it as ``.pprof.gz``."""

import gzip
import logging
import os
import pathlib
import tempfile
from typing import Union

from google.protobuf.message import EncodeError

from .config import PROFILE
from .errors import OutputError
from .profile_proto import Profile

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


def default_output_path(input_path: PathLike) -> pathlib.Path:
    """``<input-stem>.pprof.gz`` in the current directory."""
    return pathlib.Path(pathlib.Path(input_path).stem + PROFILE.OUTPUT_SUFFIX)


def _current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


def encode_profile(profile: Profile) -> bytes:
    """Serialize ``profile`` to protobuf bytes and gzip them."""
    try:
        payload = profile.SerializeToString()
    except EncodeError as exc:
        raise OutputError(f"Failed to encode profile: {exc}") from exc
    return gzip.compress(payload)


def write_profile(profile: Profile, path: PathLike) -> pathlib.Path:
    """Write ``profile`` to ``path`` atomically.

    The bytes go to a temporary file in the destination directory, which is
    renamed over ``path`` only once fully written. On failure the temporary
    file is removed and ``path`` is left untouched.

    Returns:
        The destination path

    Raises:
        OutputError: If encoding or any file operation fails
    """
    destination = pathlib.Path(path)
    data = encode_profile(profile)
    directory = destination.parent

    try:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{destination.name}.", suffix=".tmp", dir=directory)
    except OSError as exc:
        raise OutputError(f"Cannot create output file in {directory}: {exc}") from exc

    try:
        with os.fdopen(fd, "wb") as tmp:
            tmp.write(data)
            tmp.flush()
            os.fsync(tmp.fileno())
        # mkstemp creates the file 0600; give it the mode a plain open() would
        os.chmod(tmp_name, 0o666 & ~_current_umask())
        os.replace(tmp_name, destination)
    except OSError as exc:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise OutputError(f"Failed to write {destination}: {exc}") from exc

    logger.info("Wrote %s (%d bytes)", destination, len(data))
    return destination

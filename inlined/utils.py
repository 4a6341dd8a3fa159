from __future__ import annotations

import contextlib
import os

from .errors import InlinedFileNotFoundError


def maybedecode(string):
    # pyelftools hands out DW_FORM_string and DW_FORM_strp values as bytes, but some forms come back as str
    return string if type(string) is str else string.decode("utf-8", errors="replace")


@contextlib.contextmanager
def stream_or_path(obj, perms="rb"):
    if hasattr(obj, "read") and hasattr(obj, "seek"):
        obj.seek(0)
        yield obj
    else:
        if not os.path.exists(obj):
            raise InlinedFileNotFoundError("%r is not a valid path" % obj)

        with open(obj, perms) as f:
            yield f

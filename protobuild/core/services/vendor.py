"""
Vendor resolution — find the closest ``vendor`` directory above a package.
"""

from __future__ import annotations

import logging
import os
import stat
from pathlib import Path

from protobuild.core.errors import VendorResolutionError

logger = logging.getLogger(__name__)

VENDOR_DIR = "vendor"


def resolve_vendor_dir(directory: str | Path) -> Path | None:
    """Walk up from ``directory`` until a ``vendor`` directory is found.

    The directory itself is checked first, then each parent. A ``vendor``
    entry that is not a directory is ignored. The filesystem root is
    never checked.

    Returns:
        Path to the vendor directory, or None if there isn't one.

    Raises:
        VendorResolutionError: If a candidate can't be stat'd for a reason
            other than not existing.
    """
    current = Path(os.path.normpath(os.path.abspath(directory)))

    while current != Path(current.anchor):
        candidate = current / VENDOR_DIR
        try:
            st = os.stat(candidate)
        except (FileNotFoundError, NotADirectoryError):
            current = current.parent
            continue
        except OSError as e:
            raise VendorResolutionError(str(candidate), e.strerror or str(e)) from e

        if stat.S_ISDIR(st.st_mode):
            logger.debug("Vendor directory for %s: %s", directory, candidate)
            return candidate

        current = current.parent

    return None

"""Loading of compiled Move bytecode modules."""

import base64
from pathlib import Path
from typing import List, Union

import structlog

from momentx.core.exceptions import ConfigurationError

logger = structlog.get_logger(__name__)


def load_compiled_modules(path: Union[str, Path]) -> List[str]:
    """
    Read compiled modules as base64 strings.

    Args:
        path: A single ``.mv`` file, or a ``bytecode_modules`` directory whose
            ``.mv`` files are sent in file name order

    Returns:
        Base64 encoded module blobs
    """
    p = Path(path).expanduser()

    if p.is_dir():
        files = sorted(p.glob("*.mv"))
        if not files:
            raise ConfigurationError(f"No .mv modules found in {p}", details={"path": str(p)})
    elif p.is_file():
        files = [p]
    else:
        raise ConfigurationError(f"Compiled module not found: {p}", details={"path": str(p)})

    modules = []
    for file in files:
        data = file.read_bytes()
        if not data:
            raise ConfigurationError(f"Compiled module is empty: {file}", details={"path": str(file)})
        modules.append(base64.b64encode(data).decode("ascii"))

    logger.debug("Compiled modules loaded", path=str(p), count=len(modules))
    return modules

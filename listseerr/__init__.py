from listseerr.utils.logging import Logger, get_logger
from listseerr.utils.terminal import supports_utf8
from listseerr.utils.version import (
    get_docker_status,
    get_git_hash,
    get_pyproject_version,
)

__license__ = "MIT"
__version__ = get_pyproject_version()
__git_hash__ = get_git_hash()


if supports_utf8():
    LISTSEERR_HEADER = f"""
╔═══════════════════════════════════════════════════════════════════════════════╗
║                               L I S T S E E R R                               ║
╠═══════════════════════════════════════════════════════════════════════════════╣
║                                                                               ║
║  Version: {__version__:<68}║
║  Git Hash: {__git_hash__:<67}║
║  Docker: {"Yes" if get_docker_status() else "No":<69}║
║  License: {__license__:<68}║
║                                                                               ║
╚═══════════════════════════════════════════════════════════════════════════════╝
    """.strip()
else:
    LISTSEERR_HEADER = f"""
+-------------------------------------------------------------------------------+
|                               L I S T S E E R R                               |
+-------------------------------------------------------------------------------+
|                                                                               |
|  Version: {__version__:<68}|
|  Git Hash: {__git_hash__:<67}|
|  Docker: {"Yes" if get_docker_status() else "No":<69}|
|  License: {__license__:<68}|
|                                                                               |
+-------------------------------------------------------------------------------+
    """.strip()

log: Logger = get_logger()

__title__ = 'querent'
__author__ = 'Eiko Reishin (影皇嶺臣)'
__license__ = 'MIT'
# Placeholder, modified by dynamic-versioning.
__version__ = "0.1.0"

from .defaults import *
from .faults import *
from .fields import *
from .formats import *
from .menus import *
from .streams import *

VersionInfo = __import__("collections").namedtuple("VersionInfo", (
    "major",
    "minor",
    "micro",
    "releaselevel",
    "serial",
    "metadata"
))

# Placeholder, modified by dynamic-versioning.
version_info = VersionInfo(0, 1, 0, "final", 0, "")

__all__ = (
    "__title__",
    "__author__",
    "__license__",
    "__version__",
    "version_info"
)

# Load the exposed API of the default values
__all__ += defaults.__all__  # type: ignore[name-defined]
# Load the exposed API of the faults
__all__ += faults.__all__  # type: ignore[name-defined]
# Load the exposed API of the fields
__all__ += fields.__all__  # type: ignore[name-defined]
# Load the exposed API of the formats
__all__ += formats.__all__  # type: ignore[name-defined]
# Load the exposed API of the menus
__all__ += menus.__all__  # type: ignore[name-defined]
# Load the exposed API of the streams
__all__ += streams.__all__  # type: ignore[name-defined]

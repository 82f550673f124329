__version__ = "0.1.0"
__author__ = "statevault contributors"
__url__ = "https://github.com/statevault/statevault"

from .config import StatevaultConfig, StorageConfig, SweeperConfig

import logging

logger = logging.getLogger("statevault")

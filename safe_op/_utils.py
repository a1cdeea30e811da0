import logging

logger = logging.getLogger("safe-op")

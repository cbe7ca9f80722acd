"""functions-framework entry module: ``functions-framework --target zap_in``."""

import logging

from zapkit.server import zap_in

logging.basicConfig(level=logging.WARNING, format="%(levelname)s: %(message)s")

__all__ = ["zap_in"]

"""Lambda entry point: ``image_optimizer.lambda_function.handler``.

Configuration is read once when the module is imported, so a missing
OPTIMIZED_BUCKET_NAME fails the cold start instead of the first event.
"""

from .core.config import HandlerConfig
from .handler import create_handler

config = HandlerConfig.from_env()

handler = create_handler(config)

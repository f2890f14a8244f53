"""spritehooks - webhook and cron automations dispatched to sprites."""

__version__ = "0.1.0"

from .config import Settings, get_settings
from .dispatcher import DispatchOutcome, WebhookDispatcher
from .models import Automation, CronSource, ExecutionResult, SpriteConfig, WebhookSource

__all__ = [
    "Automation",
    "CronSource",
    "DispatchOutcome",
    "ExecutionResult",
    "Settings",
    "SpriteConfig",
    "WebhookDispatcher",
    "WebhookSource",
    "__version__",
    "get_settings",
]

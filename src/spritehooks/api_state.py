"""Shared mutable state for API modules.

Route modules import this *module* (not individual names) so they see the
objects created in the lifespan:

    from spritehooks import api_state as state
    await state.dispatcher.dispatch(source, request)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from slowapi import Limiter
from slowapi.util import get_remote_address

if TYPE_CHECKING:
    from spritehooks.adapters import AdapterRegistry
    from spritehooks.catalog import AutomationCatalog
    from spritehooks.dispatcher import WebhookDispatcher
    from spritehooks.engine.executor import SpriteExecutor
    from spritehooks.scheduler import CronScheduler

# ---------------------------------------------------------------------------
# Rate limiter
# ---------------------------------------------------------------------------
limiter = Limiter(key_func=get_remote_address)

# ---------------------------------------------------------------------------
# Components (initialized in lifespan)
# ---------------------------------------------------------------------------
adapters: AdapterRegistry | None = None
catalog: AutomationCatalog | None = None
executor: SpriteExecutor | None = None
dispatcher: WebhookDispatcher | None = None
cron_scheduler: CronScheduler | None = None

"""Administrative endpoints for automation definitions and cron jobs."""

from __future__ import annotations

import hmac
import logging

from fastapi import APIRouter, Depends, Header, Request

from spritehooks import api_state as state
from spritehooks.api_errors import (
    ADMIN_RESPONSES,
    CRUD_RESPONSES,
    bad_request,
    internal_error,
    not_found,
    unauthorized,
)
from spritehooks.catalog import AutomationCatalog, parse_automation_yaml
from spritehooks.config import get_settings
from spritehooks.scheduler import CronScheduler

logger = logging.getLogger(__name__)


def verify_admin_token(x_admin_token: str | None = Header(None, alias="X-Admin-Token")) -> None:
    """Require ``X-Admin-Token`` to equal the configured admin token."""
    admin_token = get_settings().admin_token
    if not admin_token:
        raise internal_error("Admin token not configured")
    if not x_admin_token or not hmac.compare_digest(
        x_admin_token.encode("utf-8"), admin_token.encode("utf-8")
    ):
        raise unauthorized()


router = APIRouter(prefix="/admin", dependencies=[Depends(verify_admin_token)])


def _catalog() -> AutomationCatalog:
    if state.catalog is None:
        raise internal_error("Catalog not initialized")
    return state.catalog


def _scheduler() -> CronScheduler:
    if state.cron_scheduler is None:
        raise internal_error("Cron scheduler not initialized")
    return state.cron_scheduler


@router.get("/automations", responses=ADMIN_RESPONSES)
async def list_automations() -> list[dict]:
    """List all stored automations."""
    automations = await _catalog().load_all()
    return [a.model_dump(exclude_none=True) for a in automations]


@router.get("/automations/{automation_id}", responses=CRUD_RESPONSES)
async def get_automation(automation_id: str) -> dict:
    """Get a single automation by ID."""
    automation = await _catalog().get(automation_id)
    if automation is None:
        raise not_found("Automation", automation_id)
    return automation.model_dump(exclude_none=True)


@router.post("/automations", responses=CRUD_RESPONSES)
async def upsert_automation(request: Request) -> dict:
    """Create or replace an automation from a YAML document body."""
    body = await request.body()
    try:
        yaml_content = body.decode("utf-8")
    except UnicodeDecodeError:
        raise bad_request("Request body must be UTF-8 YAML")

    automation = parse_automation_yaml(yaml_content)
    await _catalog().put(automation.id, yaml_content)
    logger.info(f"[{automation.id}] Automation stored", extra={"automation_id": automation.id})

    await _scheduler().sync()
    return {"id": automation.id, "message": "Automation created/updated"}


@router.delete("/automations/{automation_id}", responses=CRUD_RESPONSES)
async def delete_automation(automation_id: str) -> dict:
    """Delete an automation by ID."""
    if not await _catalog().delete(automation_id):
        raise not_found("Automation", automation_id)
    logger.info(f"[{automation_id}] Automation deleted", extra={"automation_id": automation_id})

    await _scheduler().sync()
    return {"message": "Automation deleted"}


@router.get("/cron", responses=ADMIN_RESPONSES)
def list_cron_jobs() -> dict:
    """IDs of automations with a live cron timer."""
    return {"jobs": _scheduler().active_jobs()}


@router.post("/cron/sync", responses=ADMIN_RESPONSES)
async def sync_cron_jobs() -> dict:
    """Reconcile cron timers with the catalog now."""
    result = await _scheduler().sync()
    return {
        "registered": result.registered,
        "failed": result.failed,
        "removed": result.removed,
        "jobs": _scheduler().active_jobs(),
    }

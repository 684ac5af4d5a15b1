"""POST /api/actions - every menu mutation, addressed as {domain, action, data}."""

from uuid import UUID

from fastapi import APIRouter, Request
from pydantic import BaseModel

from api.base import respond
from core.models import (
    RestaurantCreate, RestaurantUpdate,
    CategoryCreate, CategoryUpdate,
    DishCreate, DishUpdate,
)


class ActionRequest(BaseModel):
    domain: str
    action: str
    data: dict


def _take_id(data: dict) -> UUID:
    """Remove and parse the target id from an update/delete payload."""
    if "id" not in data:
        raise ValueError("'id' is required")
    return UUID(str(data.pop("id")))


class ResourceHandler:
    """create/update/delete for one domain, validating data with its pydantic models."""

    ALLOWED_ACTIONS = {"create", "update", "delete"}

    def __init__(self, service, create_model: type[BaseModel], update_model: type[BaseModel]):
        self.service = service
        self.create_model = create_model
        self.update_model = update_model

    def _handle_create(self, data: dict):
        return self.service.create(self.create_model(**data)).model_dump(mode="json")

    def _handle_update(self, data: dict):
        target_id = _take_id(data)
        return self.service.update(target_id, self.update_model(**data)).model_dump(mode="json")

    def _handle_delete(self, data: dict):
        self.service.delete(_take_id(data))
        return {"deleted": True}


def create_actions_router(services: dict) -> APIRouter:
    router = APIRouter()

    handlers = {
        "restaurant": ResourceHandler(services["restaurant"], RestaurantCreate, RestaurantUpdate),
        "category": ResourceHandler(services["category"], CategoryCreate, CategoryUpdate),
        "dish": ResourceHandler(services["dish"], DishCreate, DishUpdate),
    }

    @router.post("/actions")
    async def perform_action(request: Request, body: ActionRequest):
        handler = handlers.get(body.domain)
        if handler is None:
            raise ValueError(
                f"Unknown domain '{body.domain}'. "
                f"Valid domains: {', '.join(sorted(handlers))}"
            )

        if body.action not in handler.ALLOWED_ACTIONS:
            raise ValueError(
                f"Action '{body.action}' not allowed on '{body.domain}'. "
                f"Allowed: {', '.join(sorted(handler.ALLOWED_ACTIONS))}"
            )

        method = getattr(handler, f"_handle_{body.action}")
        return respond(request, method(dict(body.data)))

    return router

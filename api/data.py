"""GET /api/data - every read the owner dashboard makes, selected by ?type=."""

from uuid import UUID

from fastapi import APIRouter, Query, Request

from api.base import respond


def _parse_id(value: str | None, name: str) -> UUID:
    if not value:
        raise ValueError(f"'{name}' query parameter is required")
    try:
        return UUID(value)
    except ValueError:
        raise ValueError(f"'{name}' must be a valid UUID")


def _dump(result):
    if isinstance(result, list):
        return [item.model_dump(mode="json") for item in result]
    return result.model_dump(mode="json")


def create_data_router(services: dict) -> APIRouter:
    router = APIRouter()

    restaurants = services["restaurant"]
    categories = services["category"]
    dishes = services["dish"]

    # type -> (query parameter holding the id, reader); None means no id
    readers = {
        "restaurants": (None, lambda _: restaurants.list_for_owner()),
        "restaurant": ("id", restaurants.get_detail),
        "categories": ("restaurant_id", categories.list_for_restaurant),
        "category": ("id", categories.get),
        "dishes": ("restaurant_id", dishes.list_for_restaurant),
        "dish": ("id", dishes.get),
    }

    @router.get("/data")
    async def get_data(
        request: Request,
        type: str | None = Query(None),
        id: str | None = Query(None),
        restaurant_id: str | None = Query(None),
    ):
        if type is None:
            raise ValueError("'type' query parameter is required")
        if type not in readers:
            raise ValueError(f"Unknown type '{type}'. Valid types: {', '.join(sorted(readers))}")

        param, reader = readers[type]
        target = None
        if param is not None:
            target = _parse_id({"id": id, "restaurant_id": restaurant_id}[param], param)

        return respond(request, _dump(reader(target)))

    return router

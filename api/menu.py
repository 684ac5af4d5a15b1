"""GET /menu/{slug} - the public menu a QR code points at. No session needed."""

from fastapi import APIRouter, Request

from api.base import respond
from core.services.restaurant_service import RestaurantService


def create_menu_router(restaurant_service: RestaurantService) -> APIRouter:
    router = APIRouter(tags=["menu"])

    @router.get("/{slug}")
    async def get_menu(request: Request, slug: str):
        return respond(request, restaurant_service.get_public_menu(slug).model_dump(mode="json"))

    return router

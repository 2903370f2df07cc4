"""ASGI application for ChefMate."""
# mypy: ignore-errors

from __future__ import annotations

import logging
from time import perf_counter
from typing import Any, Optional
from uuid import uuid4

from fastapi import Body, Depends, FastAPI, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from pydantic import BaseModel, Field

from chefmate import __version__, metrics
from chefmate.config import get_settings
from chefmate.db.store import open_stores
from chefmate.engine.scaler import scale_recipe
from chefmate.errors import (
    BatchInProgressError,
    InvalidInputError,
    NoValidIngredientsError,
    PersistenceFailure,
    RecipeNotFoundError,
)
from chefmate.logging_utils import configure_from_settings
from chefmate.models.recipe import Ingredient, Recipe, RecipeDraft
from chefmate.models.shopping import ScaledIngredientView, ShoppingItemView
from chefmate.server import deps
from chefmate.services.recipes import RecipeBook
from chefmate.services.shopping_list import ShoppingListService

logger = logging.getLogger(__name__)

NO_VALID_INGREDIENTS_MESSAGE = "The recipe has no valid ingredients."


def _json_safe(value: Any) -> Any:
    """Convert non-serializable values into JSON-safe representations."""

    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    if isinstance(value, bytes):
        try:
            return value.decode("utf-8")
        except UnicodeDecodeError:
            return value.hex()
    if isinstance(value, (list, tuple)):
        return [_json_safe(entry) for entry in value]
    if isinstance(value, dict):
        return {key: _json_safe(sub_value) for key, sub_value in value.items()}
    return repr(value)


def _normalize_validation_errors(errors: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Ensure validation error payloads can be serialized to JSON."""

    return [{key: _json_safe(value) for key, value in error.items()} for error in errors]


def _shopping_views(service: ShoppingListService) -> list[ShoppingItemView]:
    return [ShoppingItemView.from_item(item) for item in service.sorted_items()]


def create_app() -> FastAPI:
    """Create and configure a FastAPI application instance."""

    settings = get_settings()
    configure_from_settings(settings)

    application = FastAPI(title="ChefMate", version=__version__)

    stores = open_stores(settings)
    application.state.recipe_book = RecipeBook(
        stores.recipes, default_course=settings.default_course
    )
    application.state.shopping_list = ShoppingListService(
        stores.shopping_items, default_unit=settings.default_unit
    )
    logger.debug(
        "Application created with log level %s and %s store",
        settings.log_level,
        settings.store_backend,
    )

    if settings.log_requests:
        access_logger = logging.getLogger("chefmate.access")

        @application.middleware("http")
        async def log_request_response(request: Request, call_next):
            """Log request/response details without leaking sensitive data."""

            request_id = request.headers.get("X-Request-ID") or uuid4().hex
            request.state.request_id = request_id
            start = perf_counter()
            path = request.url.path
            method = request.method
            try:
                response: Response = await call_next(request)
            except Exception:
                duration_ms = (perf_counter() - start) * 1000
                access_logger.exception(
                    "HTTP %s %s status=500 duration_ms=%.2f",
                    method,
                    path,
                    duration_ms,
                    extra={"request_id": request_id},
                )
                metrics.REQUEST_COUNT.labels(method=method, path=path, status="500").inc()
                metrics.REQUEST_LATENCY.labels(method=method, path=path).observe(
                    duration_ms / 1000.0
                )
                raise

            duration_ms = (perf_counter() - start) * 1000
            response.headers.setdefault("X-Request-ID", request_id)
            access_logger.info(
                "HTTP %s %s status=%s duration_ms=%.2f",
                method,
                path,
                response.status_code,
                duration_ms,
                extra={"request_id": request_id},
            )
            metrics.REQUEST_COUNT.labels(
                method=method,
                path=path,
                status=str(response.status_code),
            ).inc()
            metrics.REQUEST_LATENCY.labels(method=method, path=path).observe(duration_ms / 1000.0)
            return response

    @application.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        body_preview: str | None = None
        raw_body = await request.body()
        if raw_body:
            decoded = raw_body.decode("utf-8", errors="replace")
            if len(decoded) > 2048:
                decoded = decoded[:2048] + "...(truncated)"
            body_preview = decoded

        log_kwargs: dict[str, Any] = {}
        request_id = getattr(request.state, "request_id", None)
        if request_id:
            log_kwargs["extra"] = {"request_id": request_id}

        logger.warning(
            "Validation error on %s %s: %s | body=%s",
            request.method,
            request.url.path,
            exc.errors(),
            body_preview,
            **log_kwargs,
        )
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": _normalize_validation_errors(exc.errors())},
        )

    @application.exception_handler(PersistenceFailure)
    async def persistence_failure_handler(request: Request, exc: PersistenceFailure):
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": exc.user_message},
        )

    @application.exception_handler(NoValidIngredientsError)
    async def no_valid_ingredients_handler(request: Request, exc: NoValidIngredientsError):
        logger.info("Rejected scale request for recipe %s: no valid ingredients", exc.recipe_id)
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": NO_VALID_INGREDIENTS_MESSAGE},
        )

    @application.exception_handler(InvalidInputError)
    async def invalid_input_handler(request: Request, exc: InvalidInputError):
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": str(exc)},
        )

    @application.exception_handler(BatchInProgressError)
    async def batch_in_progress_handler(request: Request, exc: BatchInProgressError):
        return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)})

    @application.exception_handler(RecipeNotFoundError)
    async def recipe_not_found_handler(request: Request, exc: RecipeNotFoundError):
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})

    @application.get("/healthz", include_in_schema=False)
    def healthz() -> dict[str, str]:
        return {"status": "ok", "version": __version__}

    @application.get("/metrics", include_in_schema=False)
    def metrics_endpoint() -> Response:
        payload = generate_latest()
        return Response(content=payload, media_type=CONTENT_TYPE_LATEST)

    @application.get("/recipes", response_model=list[Recipe], summary="List recipes")
    def recipes_list(
        course: Optional[str] = Query(default=None, max_length=64),
        book: RecipeBook = Depends(deps.get_recipe_book),
    ) -> list[Recipe]:
        return book.filter_by_course(course)

    @application.get("/recipes/courses", response_model=list[str], summary="List recipe courses")
    def recipes_courses(book: RecipeBook = Depends(deps.get_recipe_book)) -> list[str]:
        return book.courses()

    @application.get("/recipes/{recipe_id}", response_model=Recipe, summary="Get recipe")
    def recipes_get(
        recipe_id: str,
        book: RecipeBook = Depends(deps.get_recipe_book),
    ) -> Recipe:
        return book.get(recipe_id)

    @application.post(
        "/recipes",
        response_model=Recipe,
        status_code=status.HTTP_201_CREATED,
        summary="Create recipe",
    )
    def recipes_create(
        payload: RecipeWriteRequest = Body(...),
        auth: None = Depends(deps.require_api_token),
        book: RecipeBook = Depends(deps.get_recipe_book),
    ) -> Recipe:
        return book.create(payload.to_draft())

    @application.put("/recipes/{recipe_id}", response_model=Recipe, summary="Update recipe")
    def recipes_update(
        recipe_id: str,
        payload: RecipeWriteRequest = Body(...),
        auth: None = Depends(deps.require_api_token),
        book: RecipeBook = Depends(deps.get_recipe_book),
    ) -> Recipe:
        return book.update(recipe_id, payload.to_draft())

    @application.delete(
        "/recipes/{recipe_id}",
        status_code=status.HTTP_204_NO_CONTENT,
        summary="Delete recipe",
    )
    def recipes_delete(
        recipe_id: str,
        auth: None = Depends(deps.require_api_token),
        book: RecipeBook = Depends(deps.get_recipe_book),
    ) -> None:
        book.delete(recipe_id)

    @application.get(
        "/recipes/{recipe_id}/scaled",
        response_model=list[ScaledIngredientView],
        summary="Preview recipe ingredients scaled to a serving count",
    )
    def recipes_scaled(
        recipe_id: str,
        servings: int = Query(..., ge=1, le=1000),
        book: RecipeBook = Depends(deps.get_recipe_book),
    ) -> list[ScaledIngredientView]:
        recipe = book.get(recipe_id)
        return [ScaledIngredientView.from_candidate(c) for c in scale_recipe(recipe, servings)]

    @application.post(
        "/recipes/{recipe_id}/shopping-list",
        response_model=list[ShoppingItemView],
        summary="Scale a recipe and add its ingredients to the shopping list",
    )
    def recipes_add_to_shopping_list(
        recipe_id: str,
        payload: AddRecipeToListRequest = Body(...),
        auth: None = Depends(deps.require_api_token),
        book: RecipeBook = Depends(deps.get_recipe_book),
        shopping: ShoppingListService = Depends(deps.get_shopping_list),
    ) -> list[ShoppingItemView]:
        recipe = book.get(recipe_id)
        servings = payload.servings or recipe.servings
        shopping.add_recipe(recipe, servings)
        return _shopping_views(shopping)

    @application.get(
        "/shopping-list",
        response_model=list[ShoppingItemView],
        summary="List shopping list items (active first)",
    )
    def shopping_list_list(
        shopping: ShoppingListService = Depends(deps.get_shopping_list),
    ) -> list[ShoppingItemView]:
        return _shopping_views(shopping)

    @application.post(
        "/shopping-list",
        response_model=list[ShoppingItemView],
        status_code=status.HTTP_201_CREATED,
        summary="Add a shopping list item by hand",
    )
    def shopping_list_create(
        payload: ShoppingListCreateRequest = Body(...),
        auth: None = Depends(deps.require_api_token),
        shopping: ShoppingListService = Depends(deps.get_shopping_list),
    ) -> list[ShoppingItemView]:
        shopping.add_manual_item(payload.name, payload.quantity, payload.unit)
        return _shopping_views(shopping)

    @application.post(
        "/shopping-list/clear-completed",
        status_code=status.HTTP_204_NO_CONTENT,
        summary="Delete completed shopping list items",
    )
    def shopping_list_clear_completed(
        auth: None = Depends(deps.require_api_token),
        shopping: ShoppingListService = Depends(deps.get_shopping_list),
    ) -> None:
        shopping.clear_completed()

    @application.post(
        "/shopping-list/clear",
        status_code=status.HTTP_204_NO_CONTENT,
        summary="Empty the shopping list",
    )
    def shopping_list_clear(
        auth: None = Depends(deps.require_api_token),
        shopping: ShoppingListService = Depends(deps.get_shopping_list),
    ) -> None:
        shopping.clear_all()

    @application.post(
        "/shopping-list/{item_id}/toggle",
        response_model=list[ShoppingItemView],
        summary="Toggle completion of a shopping list item",
    )
    def shopping_list_toggle(
        item_id: str,
        auth: None = Depends(deps.require_api_token),
        shopping: ShoppingListService = Depends(deps.get_shopping_list),
    ) -> list[ShoppingItemView]:
        shopping.toggle_item(item_id)
        return _shopping_views(shopping)

    @application.delete(
        "/shopping-list/{item_id}",
        status_code=status.HTTP_204_NO_CONTENT,
        summary="Delete shopping list item",
    )
    def shopping_list_delete(
        item_id: str,
        auth: None = Depends(deps.require_api_token),
        shopping: ShoppingListService = Depends(deps.get_shopping_list),
    ) -> None:
        shopping.remove_item(item_id)

    return application


class RecipeWriteRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    course: Optional[str] = Field(default=None, max_length=64)
    servings: int = Field(default=2, ge=1, le=1000)
    ingredients: list[Ingredient] = Field(default_factory=list)
    instructions: str = Field(default="", max_length=20000)
    external_link: Optional[str] = Field(default=None, max_length=2048)

    def to_draft(self) -> RecipeDraft:
        return RecipeDraft(**self.model_dump())


class AddRecipeToListRequest(BaseModel):
    servings: Optional[int] = Field(default=None, ge=1, le=1000)


class ShoppingListCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    quantity: Optional[float] = Field(default=None, gt=0)
    unit: Optional[str] = Field(default=None, max_length=64)


RecipeWriteRequest.model_rebuild()
AddRecipeToListRequest.model_rebuild()
ShoppingListCreateRequest.model_rebuild()


app = create_app()

__all__ = ["app", "create_app"]

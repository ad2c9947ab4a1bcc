"""HTTP client for the ingredient match endpoint.

Ingredient matching is an enhancement: callers such as recipe display must
still render when the match service is unreachable, so every failure here is
logged and reported as "no matches".
"""

import logging
from collections.abc import Sequence

import httpx
from pydantic import ValidationError

from src.config import get_settings
from src.schemas.ingredient import IngredientMatch, InventoryProduct, MatchResponse

logger = logging.getLogger(__name__)

MATCH_PATH = "/api/ingredients/match"


class MatchServiceClient:
    """Client for POST /api/ingredients/match that fails soft."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        settings = get_settings()
        self.base_url = (base_url or settings.match_service_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.match_service_timeout
        self._transport = transport

    async def find_matches(
        self,
        ingredient_name: str,
        inventory_products: Sequence[InventoryProduct],
        household_id: str | None = None,
    ) -> list[IngredientMatch]:
        """Fetch ranked matches for an ingredient; [] on any failure."""
        payload = {
            "ingredientName": ingredient_name,
            "inventoryProducts": [
                product.model_dump(by_alias=True, exclude_none=True)
                for product in inventory_products
            ],
        }
        if household_id is not None:
            payload["householdId"] = household_id

        try:
            async with httpx.AsyncClient(
                base_url=self.base_url, timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.post(MATCH_PATH, json=payload)
                response.raise_for_status()
                return MatchResponse.model_validate(response.json()).matches
        except httpx.HTTPStatusError as e:
            logger.error(
                f"Match service returned {e.response.status_code} for '{ingredient_name}'"
            )
        except httpx.HTTPError as e:
            logger.error(f"HTTP error calling match service: {e}")
        except (ValueError, ValidationError) as e:
            logger.warning(f"Malformed match service response for '{ingredient_name}': {e}")
        return []

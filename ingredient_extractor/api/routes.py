import logging
from urllib.parse import urlsplit

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError

from ingredient_extractor.config import Settings
from ingredient_extractor.errors import DecodeError
from ingredient_extractor.schemas.schemas import ExtractionResult, RecipeURL
from ingredient_extractor.utils.auth import get_current_claims, get_settings
from ingredient_extractor.utils.gemini_utils import IngredientExtractor
from ingredient_extractor.utils.sanitizer import HtmlSanitizer
from ingredient_extractor.utils.scraping_utils import fetch_html

log = logging.getLogger(__name__)

router = APIRouter()


def get_sanitizer(request: Request) -> HtmlSanitizer:
    return request.app.state.sanitizer


def get_extractor(request: Request) -> IngredientExtractor:
    return request.app.state.extractor


def target_host(url: str):
    try:
        return urlsplit(url).hostname
    except ValueError:
        return None


async def get_recipe_url(request: Request, claims: dict = Depends(get_current_claims)) -> RecipeURL:
    """Decode the body only once the caller is authorized."""
    try:
        recipe_url = RecipeURL.model_validate_json(await request.body())
    except ValidationError as e:
        raise DecodeError(f"error in decoding recepie params: {e.errors(include_url=False)}") from e
    request.state.target_host = target_host(recipe_url.url)
    return recipe_url


@router.post("/recepie", response_model=ExtractionResult)
def extract_ingredients(
    recipe_url: RecipeURL = Depends(get_recipe_url),
    settings: Settings = Depends(get_settings),
    sanitizer: HtmlSanitizer = Depends(get_sanitizer),
    extractor: IngredientExtractor = Depends(get_extractor),
):
    """
    Fetches the recipe page, strips unsafe markup and lets Gemini list its ingredients.
    """
    html = fetch_html(recipe_url.url, timeout=settings.fetch_timeout)
    log.info("fetched %s (%d chars)", recipe_url.url, len(html))

    result = extractor.extract(sanitizer.sanitize(html))
    log.info("extracted %d ingredients from %s", len(result.ingredients), recipe_url.url)
    return result


@router.get("/health")
async def health_check():
    return {"status": "healthy"}

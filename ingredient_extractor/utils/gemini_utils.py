import io
import logging
import re

import google.generativeai as genai
from google.ai.generativelanguage_v1beta.types import content
from pydantic import ValidationError

from ingredient_extractor.errors import CompletionError, UploadError
from ingredient_extractor.schemas.schemas import ExtractionResult

log = logging.getLogger(__name__)

MODEL_NAME = "gemini-1.5-flash"
UPLOAD_DISPLAY_NAME = "recepieHtml"
TRIGGER_MESSAGE = "Do"

GENERATION_CONFIG = {
    "temperature": 1,
    "top_p": 0.95,
    "top_k": 40,
    "max_output_tokens": 8192,
    "response_mime_type": "application/json",
    "response_schema": content.Schema(
        type=content.Type.OBJECT,
        required=["ingredients"],
        properties={
            "ingredients": content.Schema(
                type=content.Type.ARRAY,
                items=content.Schema(
                    type=content.Type.OBJECT,
                    required=["name", "amount"],
                    properties={
                        "name": content.Schema(type=content.Type.STRING),
                        "amount": content.Schema(type=content.Type.STRING),
                    },
                ),
            ),
        },
    ),
}

INSTRUCTION = """Given this input HTML file, please extract the ingredients of the recepie and return them in a JSON format like:

{
 "ingredients": [
  { "name": "sugar", "amount": "10g" },
  { "name": "salt", "amount": "125g" },
  { "name": "milk", "amount": "250ml" },
 ]
}

Make sure to convert imperial units to metrical units and that the response is in German.
If a ingredient is mentioned multiple times, add the amount of them together.
Further remove additional information of a recepie like water being warm or that flour is needed for something specific. I just want to have the ingredient names."""

EXAMPLE_ANSWER = (
    '```json\n{"ingredients": ['
    '{"amount": "150 ml", "name": "Wasser, warm"}, '
    '{"amount": "100 g", "name": "Weizenmehl (Typ 405)"}, '
    '{"amount": "7 g", "name": "Trockenhefe"}, '
    '{"amount": "230 g", "name": "Weizenmehl (Typ 405)"}, '
    '{"amount": "30 ml", "name": "Pflanzensahne"}, '
    '{"amount": "20 g", "name": "Zucker"}, '
    '{"amount": "2 TL", "name": "Backmalz"}, '
    '{"amount": "1 TL", "name": "Ascorbinsäure"}, '
    '{"amount": "½ TL", "name": "Salz"}, '
    '{"amount": "100 g", "name": "Alsan Bio oder Alsan S"}, '
    '{"amount": "50 g", "name": "Alsan Bio oder Alsan S"}, '
    '{"amount": "4 EL", "name": "Pflanzensahne"}, '
    '{"amount": "n. B.", "name": "Blaumohn"}, '
    '{"amount": "n. B.", "name": "Sesam"}, '
    '{"amount": "n. B.", "name": "Sonnenblumenkerne"}'
    ']}\n\n```'
)

CODE_FENCE = re.compile(r"^\s*```(?:json)?\s*(.*?)\s*```\s*$", re.DOTALL)


def build_history(uploaded_file) -> list:
    """Few-shot conversation: the task with the uploaded page, then a worked answer."""
    return [
        {"role": "user", "parts": [uploaded_file, INSTRUCTION]},
        {"role": "model", "parts": [EXAMPLE_ANSWER]},
    ]


def parse_response(response) -> ExtractionResult:
    """Join every part of the first candidate into one document and validate it."""
    candidates = getattr(response, "candidates", None)
    if not candidates:
        raise CompletionError("model returned no candidates")

    text = "".join(getattr(part, "text", "") for part in candidates[0].content.parts)
    match = CODE_FENCE.match(text)
    if match:
        text = match.group(1)

    try:
        return ExtractionResult.model_validate_json(text)
    except ValidationError as e:
        raise CompletionError(f"model output does not match the ingredient schema: {e}") from e


class IngredientExtractor:
    """Extracts ingredients from sanitized recipe HTML with Gemini.

    Every step is request scoped: a failure raises an ExtractionError and
    never takes the process down.
    """

    def __init__(self, api_key: str, model_name: str = MODEL_NAME):
        self.model_name = model_name
        if api_key:
            genai.configure(api_key=api_key)

    def upload(self, html: str):
        try:
            return genai.upload_file(
                path=io.BytesIO(html.encode("utf-8")),
                mime_type="text/plain",
                display_name=UPLOAD_DISPLAY_NAME,
            )
        except Exception as e:
            raise UploadError(f"error uploading file: {e}") from e

    def complete(self, uploaded_file):
        try:
            model = genai.GenerativeModel(
                model_name=self.model_name,
                generation_config=GENERATION_CONFIG,
            )
            chat = model.start_chat(history=build_history(uploaded_file))
            return chat.send_message(TRIGGER_MESSAGE)
        except Exception as e:
            raise CompletionError(f"error sending message: {e}") from e

    def delete(self, uploaded_file) -> None:
        try:
            genai.delete_file(uploaded_file.name)
        except Exception as e:
            log.warning("failed to delete uploaded file %s: %s", uploaded_file.name, e)

    def extract(self, sanitized_html: str) -> ExtractionResult:
        uploaded_file = self.upload(sanitized_html)
        log.info("uploaded recipe html as %s", uploaded_file.uri)
        try:
            response = self.complete(uploaded_file)
        finally:
            self.delete(uploaded_file)
        return parse_response(response)

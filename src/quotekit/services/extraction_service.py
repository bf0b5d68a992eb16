"""Natural-language pre-fill of calculator fields via OpenAI.

The model only proposes field values. They pass the same catalog
membership check as values entered by hand before anyone uses them.
"""

import json
from typing import Any

from beartype import beartype
from openai import AsyncOpenAI, OpenAIError

from ..core.config import Settings
from ..core.exceptions import CatalogMismatchError, ExtractionError
from ..core.logging_utils import get_logger
from ..models.catalog import OptionCatalog
from ..models.selection import FieldValue, Selection
from .pricing import check_selection

logger = get_logger(__name__)

MAX_INPUT_CHARS = 2000


@beartype
def build_system_prompt(catalog: OptionCatalog) -> str:
    """Describe the catalog's fields and option ids to the model."""
    lines = [
        "You are an assistant that analyzes customer requests for "
        f"{catalog.name} and extracts structured form data.",
        "",
        "Available fields and option ids:",
    ]
    for field_id, group in catalog.groups.items():
        options = ", ".join(f"{o.id} ({o.label})" for o in group.options)
        kind = "list, any subset" if group.multi_select else "one id"
        lines.append(f"- {field_id} [{group.label}; {kind}]: {options}")

    keys = ", ".join(
        f'"{field_id}": {"[]" if group.multi_select else "null"}'
        for field_id, group in catalog.groups.items()
    )
    lines.extend(
        [
            "",
            "Respond with a JSON object using exactly these keys: {" + keys + "}.",
            "Use only the option ids listed above. Use null for fields the "
            "customer did not mention and an empty list when no add-on applies.",
        ]
    )
    return "\n".join(lines)


@beartype
def parse_field_values(catalog: OptionCatalog, payload: dict[str, Any]) -> dict[str, FieldValue]:
    """Turn the model's JSON into selection field values.

    Nulls and empty values mean "not mentioned" and are dropped.
    """
    values: dict[str, FieldValue] = {}
    for field_id, raw in payload.items():
        if raw is None or raw == "" or raw == []:
            continue
        group = catalog.groups.get(field_id)
        if group is not None and group.multi_select:
            if not isinstance(raw, list) or not all(isinstance(v, str) for v in raw):
                raise ExtractionError(f"Expected a list of option ids for '{field_id}'")
            values[field_id] = frozenset(raw)
        else:
            if not isinstance(raw, str):
                raise ExtractionError(f"Expected an option id for '{field_id}'")
            values[field_id] = raw
    return values


class NaturalLanguageExtractor:
    """Turn free text into field values for a catalog."""

    def __init__(self, settings: Settings, client: AsyncOpenAI | None = None) -> None:
        """Initialize with settings and an optional pre-built client."""
        self._settings = settings
        self._client = client

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            if not self._settings.openai_api_key:
                raise ExtractionError(
                    "Natural-language pre-fill is not configured (missing OpenAI API key)"
                )
            self._client = AsyncOpenAI(
                api_key=self._settings.openai_api_key,
                timeout=self._settings.openai_timeout_seconds,
            )
        return self._client

    @beartype
    async def extract(self, catalog: OptionCatalog, free_text: str) -> dict[str, FieldValue]:
        """Extract field values from a customer's description.

        Raises:
            ExtractionError: empty input, missing configuration, API failure,
                or output that does not fit the catalog.
        """
        text = free_text.strip()
        if not text:
            raise ExtractionError("Input text is required")
        if len(text) > MAX_INPUT_CHARS:
            raise ExtractionError(f"Input text must be at most {MAX_INPUT_CHARS} characters")

        client = self._get_client()
        try:
            response = await client.chat.completions.create(
                model=self._settings.openai_model,
                messages=[
                    {"role": "system", "content": build_system_prompt(catalog)},
                    {"role": "user", "content": text},
                ],
                response_format={"type": "json_object"},
                temperature=0.3,
            )
        except OpenAIError as e:
            logger.error("OpenAI extraction for %s failed: %s", catalog.vertical, e)
            raise ExtractionError("Failed to process request") from e

        content = response.choices[0].message.content or "{}"
        try:
            payload = json.loads(content)
        except json.JSONDecodeError as e:
            raise ExtractionError("Model returned invalid JSON") from e
        if not isinstance(payload, dict):
            raise ExtractionError("Model returned a non-object JSON value")

        values = parse_field_values(catalog, payload)
        try:
            check_selection(catalog, Selection(field_values=values))
        except CatalogMismatchError as e:
            logger.warning(
                "Extraction for %s proposed values outside the catalog: %s",
                catalog.vertical,
                e.details,
            )
            raise ExtractionError(
                "Extracted values do not match the calculator options", e.details
            ) from e

        logger.info("Extracted %d field(s) for %s", len(values), catalog.vertical)
        return values

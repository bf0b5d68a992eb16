"""Tests for natural-language pre-fill."""

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from openai import OpenAIError

from quotekit.core.config import Settings
from quotekit.core.exceptions import ExtractionError
from quotekit.models.catalog import OptionCatalog
from quotekit.services.extraction_service import (
    NaturalLanguageExtractor,
    build_system_prompt,
    parse_field_values,
)


def _client(content: str | None) -> MagicMock:
    client = MagicMock()
    response = SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))]
    )
    client.chat.completions.create = AsyncMock(return_value=response)
    return client


class TestPrompt:
    """Prompt construction."""

    def test_prompt_lists_fields_and_options(self, car_wash_catalog: OptionCatalog) -> None:
        """Every field id and option id is offered to the model."""
        prompt = build_system_prompt(car_wash_catalog)

        for field_id, group in car_wash_catalog.groups.items():
            assert f"- {field_id} [" in prompt
            for option_id in group.option_ids:
                assert option_id in prompt
        assert '"add_ons": []' in prompt
        assert '"vehicle_size": null' in prompt


class TestParsing:
    """Turning model output into field values."""

    def test_drops_nulls_and_empties(self, car_wash_catalog: OptionCatalog) -> None:
        """Unmentioned fields stay unset."""
        values = parse_field_values(
            car_wash_catalog,
            {
                "service_package": "full_detail",
                "vehicle_size": None,
                "service_location": "",
                "add_ons": [],
            },
        )

        assert values == {"service_package": "full_detail"}

    def test_lists_become_sets(self, car_wash_catalog: OptionCatalog) -> None:
        """The add-on field gets a set."""
        values = parse_field_values(car_wash_catalog, {"add_ons": ["wax", "engine"]})

        assert values == {"add_ons": frozenset({"wax", "engine"})}

    def test_wrong_types_rejected(self, car_wash_catalog: OptionCatalog) -> None:
        """Numbers are not option ids."""
        with pytest.raises(ExtractionError):
            parse_field_values(car_wash_catalog, {"vehicle_size": 3})


class TestExtract:
    """End-to-end extraction with a mocked client."""

    async def test_extracts_values(
        self, settings: Settings, car_wash_catalog: OptionCatalog
    ) -> None:
        """Model output is parsed and checked against the catalog."""
        client = _client(
            json.dumps(
                {
                    "service_package": "full_detail",
                    "vehicle_size": "suv",
                    "service_location": None,
                    "urgency": None,
                    "add_ons": ["pet_hair"],
                }
            )
        )
        extractor = NaturalLanguageExtractor(settings, client=client)

        values = await extractor.extract(
            car_wash_catalog, "Full detail for my SUV, the dog sheds everywhere"
        )

        assert values == {
            "service_package": "full_detail",
            "vehicle_size": "suv",
            "add_ons": frozenset({"pet_hair"}),
        }
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["temperature"] == 0.3
        assert kwargs["model"] == settings.openai_model

    async def test_hallucinated_option_rejected(
        self, settings: Settings, car_wash_catalog: OptionCatalog
    ) -> None:
        """Model output gets no special trust."""
        extractor = NaturalLanguageExtractor(
            settings, client=_client(json.dumps({"vehicle_size": "limousine"}))
        )

        with pytest.raises(ExtractionError) as exc_info:
            await extractor.extract(car_wash_catalog, "Wash my limo")

        assert exc_info.value.details == ["vehicle_size: unknown option 'limousine'"]

    async def test_unknown_field_rejected(
        self, settings: Settings, car_wash_catalog: OptionCatalog
    ) -> None:
        """Keys outside the catalog fail the same membership check."""
        extractor = NaturalLanguageExtractor(
            settings, client=_client(json.dumps({"colour": "red"}))
        )

        with pytest.raises(ExtractionError):
            await extractor.extract(car_wash_catalog, "A red car")

    @pytest.mark.parametrize("content", ["not json", "[1, 2]"])
    async def test_invalid_json(
        self, settings: Settings, car_wash_catalog: OptionCatalog, content: str
    ) -> None:
        """Non-object output is an extraction error."""
        extractor = NaturalLanguageExtractor(settings, client=_client(content))

        with pytest.raises(ExtractionError):
            await extractor.extract(car_wash_catalog, "Wash my car")

    async def test_empty_content_is_no_values(
        self, settings: Settings, car_wash_catalog: OptionCatalog
    ) -> None:
        """An empty reply extracts nothing."""
        extractor = NaturalLanguageExtractor(settings, client=_client(None))

        assert await extractor.extract(car_wash_catalog, "Hello") == {}

    async def test_api_failure(
        self, settings: Settings, car_wash_catalog: OptionCatalog
    ) -> None:
        """Client errors are wrapped."""
        client = MagicMock()
        client.chat.completions.create = AsyncMock(side_effect=OpenAIError("down"))
        extractor = NaturalLanguageExtractor(settings, client=client)

        with pytest.raises(ExtractionError, match="Failed to process request"):
            await extractor.extract(car_wash_catalog, "Wash my car")

    async def test_empty_input(
        self, settings: Settings, car_wash_catalog: OptionCatalog
    ) -> None:
        """Blank text is rejected before calling the model."""
        client = _client("{}")
        extractor = NaturalLanguageExtractor(settings, client=client)

        with pytest.raises(ExtractionError, match="required"):
            await extractor.extract(car_wash_catalog, "   ")

        client.chat.completions.create.assert_not_called()

    async def test_missing_api_key(
        self, settings: Settings, car_wash_catalog: OptionCatalog
    ) -> None:
        """Without a key or client the extractor refuses to run."""
        extractor = NaturalLanguageExtractor(settings)

        with pytest.raises(ExtractionError, match="not configured"):
            await extractor.extract(car_wash_catalog, "Wash my car")

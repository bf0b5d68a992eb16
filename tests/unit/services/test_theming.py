"""Tests for scoped theme rendering."""

from datetime import datetime, timezone
from uuid import uuid4

from quotekit.models.calculator import CalculatorInstance, CatalogOverrides, ThemeConfig
from quotekit.services.theming import (
    EMBED_ATTRIBUTE,
    embed_snippet,
    render_theme_css,
    theme_variables,
)


def _instance(theme: ThemeConfig, embed_id: str = "embed1234abcd") -> CalculatorInstance:
    now = datetime.now(timezone.utc)
    return CalculatorInstance(
        id=uuid4(),
        owner_id=uuid4(),
        vertical="portrait-photography",
        embed_id=embed_id,
        theme=theme,
        overrides=CatalogOverrides(),
        created_at=now,
        updated_at=now,
    )


class TestThemeCss:
    """CSS generation."""

    def test_variables(self) -> None:
        """Every theme value becomes a custom property."""
        variables = theme_variables(
            ThemeConfig(primary_color="#123456", border_radius_px=4)
        )

        assert variables["--qk-primary"] == "#123456"
        assert variables["--qk-radius"] == "4px"
        assert "--qk-logo" not in variables

    def test_css_scoped_to_instance(self) -> None:
        """Rules apply only inside the instance's embed."""
        css = render_theme_css(ThemeConfig(primary_color="#123456"), "embed1234abcd")

        assert css.startswith(f'[{EMBED_ATTRIBUTE}="embed1234abcd"] {{')
        assert "--qk-primary: #123456;" in css
        assert ":root" not in css

    def test_two_instances_do_not_share_rules(self) -> None:
        """Different embeds get different selectors and values."""
        red = render_theme_css(ThemeConfig(primary_color="#FF0000"), "embed-red-001")
        blue = render_theme_css(ThemeConfig(primary_color="#0000FF"), "embed-blue-01")

        assert "embed-red-001" in red and "embed-blue-01" not in red
        assert "#0000FF" in blue and "#FF0000" not in blue

    def test_logo_url_quoted(self) -> None:
        """Logo URLs are emitted inside url("...")."""
        variables = theme_variables(ThemeConfig(logo_url="https://cdn.test/logo.png"))

        assert variables["--qk-logo"] == 'url("https://cdn.test/logo.png")'


def test_embed_snippet() -> None:
    """The snippet is an iframe pointing at the embed URL."""
    instance = _instance(ThemeConfig())

    snippet = embed_snippet(instance, "https://app.quotekit.test")

    assert snippet.startswith("<iframe ")
    assert 'src="https://app.quotekit.test/embed/embed1234abcd"' in snippet
    assert f'{EMBED_ATTRIBUTE}="embed1234abcd"' in snippet

"""Branding rendered as CSS scoped to one calculator instance.

Several calculators can share a host page, so themes are never written to
global styles: each rule set is bound to the instance's embed id.
"""

from html import escape

from beartype import beartype

from ..models.calculator import CalculatorInstance, ThemeConfig

EMBED_ATTRIBUTE = "data-quotekit-embed"


@beartype
def theme_variables(theme: ThemeConfig) -> dict[str, str]:
    """CSS custom properties for a theme, in declaration order."""
    variables = {
        "--qk-primary": theme.primary_color,
        "--qk-secondary": theme.secondary_color,
        "--qk-accent": theme.accent_color,
        "--qk-font-family": theme.font_family,
        "--qk-radius": f"{theme.border_radius_px}px",
    }
    if theme.logo_url:
        logo = theme.logo_url.replace('"', "%22").replace(")", "%29")
        variables["--qk-logo"] = f'url("{logo}")'
    return variables


@beartype
def render_theme_css(theme: ThemeConfig, embed_id: str) -> str:
    """CSS for one instance, scoped by its embed attribute."""
    selector = f'[{EMBED_ATTRIBUTE}="{escape(embed_id, quote=True)}"]'
    declarations = "\n".join(
        f"  {name}: {value};" for name, value in theme_variables(theme).items()
    )
    return f"{selector} {{\n{declarations}\n}}\n"


@beartype
def embed_snippet(instance: CalculatorInstance, base_url: str) -> str:
    """HTML snippet a business pastes into its site."""
    src = escape(instance.embed_url(base_url), quote=True)
    embed_id = escape(instance.embed_id, quote=True)
    return (
        f'<iframe src="{src}" {EMBED_ATTRIBUTE}="{embed_id}" '
        'width="100%" height="800" frameborder="0" '
        'style="border: none;"></iframe>'
    )

"""Option catalog store backed by per-vertical JSON files."""

from pathlib import Path

from beartype import beartype
from pydantic import ValidationError

from ..core.exceptions import MalformedCatalogError
from ..core.logging_utils import get_logger
from ..core.result_types import Err, Ok, Result
from ..models.calculator import CalculatorTemplate, CatalogOverrides
from ..models.catalog import OptionCatalog
from .pricing import apply_overrides, validate_catalog

logger = get_logger(__name__)


class CatalogStore:
    """Read-only registry of vertical catalogs.

    Every catalog is validated when it is added; a malformed catalog is an
    operator error and aborts loading.
    """

    def __init__(self, catalogs: list[OptionCatalog] | None = None) -> None:
        """Initialize the store, optionally with catalogs."""
        self._catalogs: dict[str, OptionCatalog] = {}
        for catalog in catalogs or []:
            self.add(catalog)

    @classmethod
    @beartype
    def from_directory(cls, directory: Path) -> "CatalogStore":
        """Load every ``*.json`` catalog in ``directory``."""
        if not directory.is_dir():
            raise FileNotFoundError(f"Catalog directory not found: {directory}")

        store = cls()
        for path in sorted(directory.glob("*.json")):
            try:
                catalog = OptionCatalog.model_validate_json(
                    path.read_text(encoding="utf-8")
                )
            except ValidationError as e:
                raise MalformedCatalogError(
                    path.stem,
                    [
                        f"{path.name}: {error['msg']} at {error['loc']}"
                        for error in e.errors()
                    ],
                ) from e
            if catalog.vertical != path.stem:
                raise MalformedCatalogError(
                    catalog.vertical,
                    [f"{path.name}: vertical must match the file name"],
                )
            store.add(catalog)

        logger.info("Loaded %d catalogs from %s", len(store), directory)
        return store

    @beartype
    def add(self, catalog: OptionCatalog) -> None:
        """Register a catalog after validating it."""
        validate_catalog(catalog)
        if catalog.vertical in self._catalogs:
            raise MalformedCatalogError(
                catalog.vertical, ["vertical is defined more than once"]
            )
        self._catalogs[catalog.vertical] = catalog

    def __len__(self) -> int:
        return len(self._catalogs)

    def __contains__(self, vertical: object) -> bool:
        return vertical in self._catalogs

    @beartype
    def list_catalogs(self) -> list[OptionCatalog]:
        """Catalogs sorted by vertical."""
        return [self._catalogs[v] for v in sorted(self._catalogs)]

    @beartype
    def list_templates(self, category: str | None = None) -> list[CalculatorTemplate]:
        """Calculator templates for the dashboard, optionally for one category."""
        return [
            CalculatorTemplate(
                slug=catalog.vertical,
                name=catalog.name,
                category=catalog.category,
                description=catalog.description,
            )
            for catalog in self.list_catalogs()
            if category is None or catalog.category == category
        ]

    @beartype
    def get_catalog(self, vertical: str) -> Result[OptionCatalog, str]:
        """Look up a catalog by vertical."""
        catalog = self._catalogs.get(vertical)
        if catalog is None:
            return Err(f"Unknown vertical '{vertical}'")
        return Ok(catalog)

    @beartype
    def effective_catalog(
        self, vertical: str, overrides: CatalogOverrides
    ) -> Result[OptionCatalog, str]:
        """Catalog for a calculator instance with its price overrides applied."""
        catalog_result = self.get_catalog(vertical)
        if isinstance(catalog_result, Err):
            return catalog_result
        return apply_overrides(catalog_result.unwrap(), overrides)

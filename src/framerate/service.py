from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Protocol, Sequence

from .builder import CompatibilityEngine
from .config import Settings
from .db import QuoteRecord
from .errors import (
    EmptyAnalysisRequestError,
    ProductsNotFoundError,
    QuoteNotFoundError,
    TooManyProductsError,
)
from .schemas import BuildAnalysis, CompatibilityStatus, ComponentCategory, Product

logger = logging.getLogger(__name__)


class CatalogProtocol(Protocol):
    def find_products(self, product_ids: Sequence[str]) -> List[Product]: ...
    def quote_products(self, quote_id: str) -> List[Product]: ...
    def get_quote(self, quote_id: str) -> Optional[QuoteRecord]: ...
    def save_analysis(self, quote_id: str, analysis: BuildAnalysis) -> None: ...


def map_products_to_components(products: Iterable[Product]) -> Dict[ComponentCategory, Product]:
    """
    Slot products by category slug.

    Products without a category, or whose slug is not a build category, are
    skipped. A later product in the same category replaces an earlier one.
    """
    parts: Dict[ComponentCategory, Product] = {}
    for product in products:
        if not product.category:
            continue
        try:
            category = ComponentCategory(product.category)
        except ValueError:
            continue
        parts[category] = product
    return parts


class AnalysisService:
    def __init__(
        self,
        repo: CatalogProtocol,
        engine: Optional[CompatibilityEngine] = None,
        settings: Optional[Settings] = None,
    ):
        self.repo = repo
        self.engine = engine or CompatibilityEngine()
        self.settings = settings or Settings()

    def analyze_products(self, product_ids: Sequence[str]) -> BuildAnalysis:
        """Analyze an ad-hoc set of product ids. Nothing is persisted."""
        if not product_ids:
            raise EmptyAnalysisRequestError()
        limit = self.settings.max_products_per_analysis
        if len(product_ids) > limit:
            raise TooManyProductsError(len(product_ids), limit)

        products = self.repo.find_products(product_ids)
        if not products:
            raise ProductsNotFoundError(list(product_ids))
        if len(products) < len(set(product_ids)):
            logger.warning(
                "Resolved %d of %d requested products", len(products), len(set(product_ids))
            )

        return self.engine.run(map_products_to_components(products))

    def analyze_quote(self, quote_id: str, persist: bool = True) -> BuildAnalysis:
        """
        Analyze a saved quote and, when ``persist``, overwrite the analysis stored on it.

        A quote without items is valid with 0 W and is not persisted.
        """
        if self.repo.get_quote(quote_id) is None:
            raise QuoteNotFoundError(quote_id)

        products = self.repo.quote_products(quote_id)
        if not products:
            return BuildAnalysis(
                status=CompatibilityStatus.VALID,
                estimated_wattage=0,
                issues=(),
                analyzed_at=datetime.now(timezone.utc),
            )

        analysis = self.engine.run(map_products_to_components(products))
        if persist:
            self.repo.save_analysis(quote_id, analysis)
            logger.info(
                "Quote %s analyzed: status=%s wattage=%dW issues=%d",
                quote_id,
                analysis.status,
                analysis.estimated_wattage,
                len(analysis.issues),
            )
        return analysis

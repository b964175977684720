"""Exceptions raised by framerate callers and the components-map boundary."""


class FramerateError(Exception):
    """Base class for framerate errors."""


class InvalidCategoryError(FramerateError, ValueError):
    """A components map key is not one of the known component categories."""

    def __init__(self, category: str) -> None:
        super().__init__(f"Unknown component category: {category}")
        self.category = category


class AnalysisRequestError(FramerateError):
    """An analysis request was rejected before the engine ran."""


class EmptyAnalysisRequestError(AnalysisRequestError):
    def __init__(self) -> None:
        super().__init__("product_ids cannot be empty")


class TooManyProductsError(AnalysisRequestError):
    def __init__(self, count: int, limit: int) -> None:
        super().__init__(f"Maximum {limit} products per analysis, got {count}")
        self.count = count
        self.limit = limit


class ProductsNotFoundError(AnalysisRequestError):
    def __init__(self, product_ids: list[str]) -> None:
        super().__init__("No products found with provided IDs")
        self.product_ids = product_ids


class QuoteNotFoundError(FramerateError):
    def __init__(self, quote_id: str) -> None:
        super().__init__(f"Quote not found: {quote_id}")
        self.quote_id = quote_id

# walkout/utils/errors.py


class WalkoutAnalysisError(Exception):
    """Base class for failures that abort a walkout analysis."""

    message = "Analysis failed"

    def __init__(self, detail: str = None):
        self.detail = detail
        super().__init__(detail or self.message)

    def to_response(self) -> dict:
        response = {"success": False, "message": self.message}
        if self.detail:
            response["error"] = self.detail
        return response


class InvalidInputError(WalkoutAnalysisError):
    message = "Invalid JSON data"


class EmptyDataError(WalkoutAnalysisError):
    message = "No data found in one or both sources"


class RuleStoreError(WalkoutAnalysisError):
    message = "Failed to load reconciliation rules"


class LenientServicesError(WalkoutAnalysisError):
    message = "Failed to load lenient service list"


class MissingExtractionError(WalkoutAnalysisError):
    """Raised when a stored walkout lacks one side's extracted data."""

    def __init__(self, side: str):
        self.side = side
        self.message = (
            f"{side} walkout image data not found. "
            f"Please upload and extract {side} walkout image first."
        )
        super().__init__(None)

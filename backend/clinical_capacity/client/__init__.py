"""Client-side capacity board, editor and API client."""

from clinical_capacity.client.api import CapacityApiClient
from clinical_capacity.client.editor import (
    CapacityBoard,
    CapacityEditor,
    CapacityValues,
    EditFormState,
    parse_form,
)
from clinical_capacity.client.exceptions import (
    CapacityClientError,
    CapacityNetworkError,
    CapacityPermissionError,
    CapacityServerError,
    CapacityValidationError,
)

__all__ = [
    "CapacityApiClient",
    "CapacityBoard",
    "CapacityClientError",
    "CapacityEditor",
    "CapacityNetworkError",
    "CapacityPermissionError",
    "CapacityServerError",
    "CapacityValidationError",
    "CapacityValues",
    "EditFormState",
    "parse_form",
]

"""Custom exceptions for the business-contacts tool."""


class BusinessContactsError(Exception):
    """Base exception for all business-contacts errors."""
    pass


class ConfigurationError(BusinessContactsError):
    """Raised when the API key or other settings are missing or rejected."""
    pass


class PlacesError(BusinessContactsError):
    """Raised when a Places API search or detail lookup fails."""
    pass


class OutputError(BusinessContactsError):
    """Raised when the CSV output file cannot be written."""
    pass

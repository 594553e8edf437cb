"""Exceptions raised by the spec portal core."""


class SpecPortalError(Exception):
    """Base class for spec portal errors."""


class SpecParseError(SpecPortalError):
    """A spec file could not be turned into a usable OpenAPI document."""

    def __init__(self, file_name: str, reason: str):
        self.file_name = file_name
        self.reason = reason
        super().__init__(f"{file_name}: {reason}")


class SpecNotFoundError(SpecPortalError):
    """No spec exists for a (service, language, version) triple."""

    def __init__(self, service: str, language: str, version: str | None = None):
        self.service = service
        self.language = language
        self.version = version
        where = f"language '{language}'"
        if version:
            where += f", version '{version}'"
        super().__init__(f"API spec '{service}' not found for {where}")


class MissingInfoError(SpecParseError):
    """The document parsed but carries no usable ``info`` block."""

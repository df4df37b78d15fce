"""Shared models for the extension blocklist catalog and session state."""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, Field

MAX_CUSTOM = 200
MAX_NAME_LENGTH = 20

SelectionMap = dict[str, bool]


def normalize_extension_name(name: str) -> str:
    """Return the case-insensitive comparison key for an extension name."""
    return name.lower()


class FixedExtension(BaseModel):
    """Server-defined extension that can only be toggled on or off."""

    id: int | str = Field(
        validation_alias=AliasChoices("blockFixedFileExtensionId", "fixedFileExtensionId", "id")
    )
    name: str = Field(validation_alias=AliasChoices("extensionName", "name"))

    @property
    def normalized_name(self) -> str:
        return normalize_extension_name(self.name)


class CustomExtension(BaseModel):
    """User-created blocklist entry identified by a server-assigned id."""

    id: int | str = Field(validation_alias=AliasChoices("customFileExtensionId", "id"))
    name: str = Field(validation_alias=AliasChoices("extensionName", "name"))

    @property
    def normalized_name(self) -> str:
        return normalize_extension_name(self.name)


class AllExtensionsPayload(BaseModel):
    """Response body of the list-all endpoint."""

    custom: list[CustomExtension] = Field(
        default_factory=list, validation_alias="customFileExtensions"
    )
    fixed: list[FixedExtension] = Field(
        default_factory=list, validation_alias="fixedFileExtensions"
    )


class BlockedFixedPayload(BaseModel):
    """Response body of the blocked-fixed endpoint."""

    data: list[FixedExtension] = Field(default_factory=list)


class Catalog(BaseModel):
    """Normalized result of one joint catalog load."""

    custom_extensions: list[CustomExtension] = Field(default_factory=list)
    fixed_all: list[FixedExtension] = Field(default_factory=list)
    fixed_blocked: list[FixedExtension] = Field(default_factory=list)


class FixedExtensionState(BaseModel):
    """One fixed extension with its derived blocked flag."""

    id: int | str
    name: str
    blocked: bool


class BlocklistState(BaseModel):
    """Point-in-time view of a blocklist session for rendering."""

    fixed: list[FixedExtensionState] = Field(default_factory=list)
    selection: SelectionMap = Field(default_factory=dict)
    custom: list[CustomExtension] = Field(default_factory=list)
    custom_count: int = 0
    max_custom: int = MAX_CUSTOM
    pending_input: str = ""
    error: str | None = None
    last_load_error: str | None = None

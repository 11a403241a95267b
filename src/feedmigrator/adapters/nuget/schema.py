"""Pydantic models describing NuGet V3 feed documents.

Registration documents are parsed into a tagged variant once, at the document
boundary: ``RegistrationPage | OpenCatalogPage | ClosedCatalogPage | CatalogLeaf``.
Pages are told apart from leaves by their ``@type`` tag, and open pages from
closed ones by whether an ``items`` list is embedded.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Annotated, Final, Literal, cast

from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    Tag,
    TypeAdapter,
    field_validator,
    model_validator,
)

from .errors import ResourceNotFoundError

SEARCH_SERVICE_PATTERN: Final[re.Pattern[str]] = re.compile(r"^SearchQueryService")
REGISTRATION_BASE_TYPE: Final[str] = "RegistrationsBaseUrl/3.6.0"

CATALOG_PAGE_TYPE: Final[str] = "catalog:CatalogPage"
PACKAGE_TYPE: Final[str] = "Package"
REGISTRATION_ROOT_TYPES: Final[frozenset[str]] = frozenset(
    {"catalog:CatalogRoot", "PackageRegistration"}
)

RegistrationKind = Literal["registration", "open-page", "closed-page", "leaf"]


def _type_tags(value: object) -> tuple[str, ...]:
    if isinstance(value, str):
        return (value,)
    if isinstance(value, list | tuple):
        return tuple(str(tag) for tag in cast("list[object]", value))
    return ()


class NuGetBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


# Service index ------------------------------------------------------------


class ServiceResource(NuGetBaseModel):
    location: str = Field(alias="@id")
    type: str = Field(alias="@type")
    comment: str | None = None


class ServiceIndex(NuGetBaseModel):
    version: str | None = None
    resources: list[ServiceResource] = Field(default_factory=list["ServiceResource"])

    def first_matching(self, pattern: re.Pattern[str]) -> ServiceResource | None:
        return next((res for res in self.resources if pattern.search(res.type)), None)

    def first_of_type(self, resource_type: str) -> ServiceResource | None:
        return next((res for res in self.resources if res.type == resource_type), None)

    def search_endpoint(self) -> str:
        resource = self.first_matching(SEARCH_SERVICE_PATTERN)
        if resource is None:
            raise ResourceNotFoundError(SEARCH_SERVICE_PATTERN.pattern)
        return resource.location

    def registration_base(self) -> str:
        resource = self.first_of_type(REGISTRATION_BASE_TYPE)
        if resource is None:
            raise ResourceNotFoundError(REGISTRATION_BASE_TYPE)
        return resource.location


# Search -------------------------------------------------------------------


class SearchVersion(NuGetBaseModel):
    version: str


class SearchResult(NuGetBaseModel):
    id: str
    version: str | None = None
    versions: list[SearchVersion] = Field(default_factory=list["SearchVersion"])


class SearchResponse(NuGetBaseModel):
    total_hits: int | None = Field(default=None, alias="totalHits")
    data: list[SearchResult] = Field(default_factory=list["SearchResult"])


# Registration -------------------------------------------------------------


class TaggedModel(NuGetBaseModel):
    type_tags: tuple[str, ...] = Field(default=(), alias="@type")

    @field_validator("type_tags", mode="before")
    @classmethod
    def _normalize_tags(cls, value: object) -> tuple[str, ...]:
        return _type_tags(value)


class PackageDetails(NuGetBaseModel):
    id: str
    version: str
    package_content: str | None = Field(default=None, alias="packageContent")


class CatalogLeaf(TaggedModel):
    kind: Literal["leaf"] = "leaf"
    location: str | None = Field(default=None, alias="@id")
    catalog_entry: PackageDetails = Field(alias="catalogEntry")
    package_content: str | None = Field(default=None, alias="packageContent")

    @model_validator(mode="after")
    def _require_content(self) -> CatalogLeaf:
        if self.content_location is None:
            raise ValueError(
                f"Package leaf {self.catalog_entry.id} {self.catalog_entry.version} "
                "has no content location"
            )
        return self

    @property
    def content_location(self) -> str | None:
        return self.catalog_entry.package_content or self.package_content


class ClosedCatalogPage(TaggedModel):
    kind: Literal["closed-page"] = "closed-page"
    location: str = Field(alias="@id")
    count: int | None = None
    lower: str | None = None
    upper: str | None = None


class OpenCatalogPage(TaggedModel):
    kind: Literal["open-page"] = "open-page"
    location: str | None = Field(default=None, alias="@id")
    count: int | None = None
    lower: str | None = None
    upper: str | None = None
    items: list[RegistrationItem]


class RegistrationPage(TaggedModel):
    kind: Literal["registration"] = "registration"
    location: str | None = Field(default=None, alias="@id")
    count: int | None = None
    items: list[RegistrationItem] = Field(default_factory=list["RegistrationItem"])


def _item_kind(value: object) -> RegistrationKind | None:
    if isinstance(value, CatalogLeaf | OpenCatalogPage | ClosedCatalogPage | RegistrationPage):
        return value.kind
    if not isinstance(value, Mapping):
        return None
    mapping = cast("Mapping[str, object]", value)
    tags = _type_tags(mapping.get("@type"))
    if PACKAGE_TYPE in tags:
        return "leaf"
    if CATALOG_PAGE_TYPE in tags:
        return "open-page" if mapping.get("items") is not None else "closed-page"
    return None


def _document_kind(value: object) -> RegistrationKind | None:
    if isinstance(value, Mapping):
        tags = _type_tags(cast("Mapping[str, object]", value).get("@type"))
        if REGISTRATION_ROOT_TYPES.intersection(tags):
            return "registration"
    return _item_kind(value)


RegistrationItem = Annotated[
    Annotated[OpenCatalogPage, Tag("open-page")]
    | Annotated[ClosedCatalogPage, Tag("closed-page")]
    | Annotated[CatalogLeaf, Tag("leaf")],
    Discriminator(_item_kind),
]

RegistrationResource = Annotated[
    Annotated[RegistrationPage, Tag("registration")]
    | Annotated[OpenCatalogPage, Tag("open-page")]
    | Annotated[ClosedCatalogPage, Tag("closed-page")]
    | Annotated[CatalogLeaf, Tag("leaf")],
    Discriminator(_document_kind),
]

OpenCatalogPage.model_rebuild()
RegistrationPage.model_rebuild()

_REGISTRATION_ADAPTER: TypeAdapter[
    RegistrationPage | OpenCatalogPage | ClosedCatalogPage | CatalogLeaf
] = TypeAdapter(RegistrationResource)


def parse_registration_document(
    payload: object,
) -> RegistrationPage | OpenCatalogPage | ClosedCatalogPage | CatalogLeaf:
    """Validate a fetched registration document into its variant."""

    return _REGISTRATION_ADAPTER.validate_python(payload)

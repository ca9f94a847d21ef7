"""Request models for the catalog API.

Field names are snake_case and line up with the ``Book`` columns; the API
speaks camelCase, so models are populated through the camelCase aliases
only and unknown keys (snake_case spellings included) are dropped.
Server-computed columns (ratings, timestamps) have no field here, so
clients cannot set them.

Constraints mirror the column types: money fits ``Numeric(10, 2)`` and
counters fit a 32-bit ``Integer``.
"""

from datetime import date
from decimal import Decimal
from typing import Annotated, Any, Optional

from pydantic import (
    UUID4,
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    StringConstraints,
    TypeAdapter,
    ValidationError,
    field_validator,
)
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from .db.models import BookFormat

INT_MAX = 2**31 - 1

_http_url = TypeAdapter(HttpUrl)


def _not_blank(value: str) -> str:
    if not value.strip():
        raise PydanticCustomError("blank_string", "Value must not be blank")
    return value


def _valid_url(value: str) -> str:
    # Validated as an http(s) URL but stored as sent.
    try:
        _http_url.validate_python(value)
    except ValidationError:
        raise PydanticCustomError("url_parsing", "Input should be a valid URL") from None
    return value


Name = Annotated[str, StringConstraints(max_length=255), AfterValidator(_not_blank)]
Title = Annotated[str, StringConstraints(max_length=500), AfterValidator(_not_blank)]
Text = Annotated[str, AfterValidator(_not_blank)]
Url = Annotated[str, AfterValidator(_valid_url)]
Isbn = Annotated[str, StringConstraints(pattern=r"^(?:\d{10}|\d{13}|[\d-]{13,17})$")]
Isbn13 = Annotated[str, StringConstraints(pattern=r"^(?:\d{13}|[\d-]{17})$")]
Slug = Annotated[str, StringConstraints(max_length=255, pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$")]
Email = Annotated[str, StringConstraints(max_length=255, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")]
Price = Annotated[Decimal, Field(gt=0, max_digits=10, decimal_places=2)]
DiscountPrice = Annotated[Decimal, Field(ge=0, max_digits=10, decimal_places=2)]
PageCount = Annotated[int, Field(ge=1, le=INT_MAX)]
Stock = Annotated[int, Field(ge=0, le=INT_MAX)]

_ISBN_MESSAGES = {"isbn": "Invalid ISBN format", "isbn13": "Invalid ISBN-13 format"}


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        extra="ignore",
    )


class _BookInput(_CamelModel):
    @field_validator("isbn", "isbn13", mode="wrap", check_fields=False)
    @classmethod
    def _isbn_message(cls, value, handler, info):
        try:
            return handler(value)
        except ValidationError:
            raise PydanticCustomError("isbn_format", _ISBN_MESSAGES[info.field_name]) from None


class CreateBookInput(_BookInput):
    """Book creation payload.

    Attributes:
        author_ids: Existing author identifiers, credited in this order
        category_ids: Existing category identifiers; the first is primary
    """

    title: Title
    description: Text
    format: BookFormat
    price: Price
    cover_image_url: Url

    isbn: Optional[Isbn] = None
    isbn13: Optional[Isbn13] = None
    subtitle: Optional[Annotated[str, StringConstraints(max_length=500)]] = None
    publisher: Optional[Annotated[str, StringConstraints(max_length=255)]] = None
    edition: Optional[Annotated[str, StringConstraints(max_length=100)]] = None
    language: Annotated[str, StringConstraints(max_length=10)] = "en"
    publication_date: Optional[date] = None
    page_count: Optional[PageCount] = None
    discount_price: Optional[DiscountPrice] = None
    stock_quantity: Stock = 0
    preview_url: Optional[Url] = None
    additional_info: dict[str, Any] = Field(default_factory=dict)
    is_featured: bool = False
    is_active: bool = True

    author_ids: list[UUID4] = Field(default_factory=list)
    category_ids: list[UUID4] = Field(default_factory=list)

    def book_fields(self) -> dict[str, Any]:
        return self.model_dump(exclude={"author_ids", "category_ids"})


class UpdateBookInput(_BookInput):
    """Partial update; only fields present in the request are applied.

    Relation identifiers are dropped with the other unknown keys: this
    operation does not re-link authors or categories. Columns that are
    NOT NULL may be omitted but not set to null.
    """

    title: Optional[Title] = None
    description: Optional[Text] = None
    format: Optional[BookFormat] = None
    price: Optional[Price] = None
    cover_image_url: Optional[Url] = None
    isbn: Optional[Isbn] = None
    isbn13: Optional[Isbn13] = None
    subtitle: Optional[Annotated[str, StringConstraints(max_length=500)]] = None
    publisher: Optional[Annotated[str, StringConstraints(max_length=255)]] = None
    edition: Optional[Annotated[str, StringConstraints(max_length=100)]] = None
    language: Optional[Annotated[str, StringConstraints(max_length=10)]] = None
    publication_date: Optional[date] = None
    page_count: Optional[PageCount] = None
    discount_price: Optional[DiscountPrice] = None
    stock_quantity: Optional[Stock] = None
    preview_url: Optional[Url] = None
    additional_info: Optional[dict[str, Any]] = None
    is_featured: Optional[bool] = None
    is_active: Optional[bool] = None

    @field_validator(
        "title",
        "description",
        "format",
        "price",
        "cover_image_url",
        "language",
        "stock_quantity",
        "additional_info",
        "is_featured",
        "is_active",
        mode="before",
    )
    @classmethod
    def _not_null(cls, value):
        if value is None:
            raise PydanticCustomError("null_value", "Value must not be null")
        return value

    def book_fields(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class ListBooksQuery(_CamelModel):
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=100)
    search: Optional[Annotated[str, StringConstraints(max_length=100)]] = None
    format: Optional[BookFormat] = None
    is_active: Optional[bool] = None
    is_featured: Optional[bool] = None


class CreateAuthorInput(_CamelModel):
    name: Name
    bio: Optional[str] = None
    photo_url: Optional[Url] = None
    birth_date: Optional[date] = None


class CreateCategoryInput(_CamelModel):
    name: Name
    slug: Optional[Slug] = None
    parent_id: Optional[UUID4] = None
    description: Optional[str] = None

    def category_fields(self) -> dict[str, Any]:
        fields = self.model_dump()
        if self.parent_id is not None:
            fields["parent_id"] = str(self.parent_id)
        return fields


class PageQuery(_CamelModel):
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=100)

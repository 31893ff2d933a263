"""
Google Books engine.

API Documentation : https://developers.google.com/books/docs/v1/using
Supports : ISBN-10, ISBN-13
Data : title, authors, publisher, description, cover, preview links

Works without an API key within the anonymous quota (~1000 requests/day).
"""

from typing import List, Optional

from pydantic import Field

from ..classifier import is_isbn, normalize_isbn
from ..interfaces import BookData, LookupResult, ProductCategory, ProductInfo
from ..normalization import build_metadata, clean_text, flatten_names, secure_url
from .base import BaseLookupEngine, Payload, parse_payload


class ImageLinks(Payload):
    thumbnail: Optional[str] = None
    small_thumbnail: Optional[str] = Field(default=None, alias="smallThumbnail")


class IndustryIdentifier(Payload):
    type: Optional[str] = None
    identifier: Optional[str] = None


class VolumeInfo(Payload):
    title: Optional[str] = None
    subtitle: Optional[str] = None
    authors: Optional[List[str]] = None
    publisher: Optional[str] = None
    published_date: Optional[str] = Field(default=None, alias="publishedDate")
    description: Optional[str] = None
    page_count: Optional[int] = Field(default=None, alias="pageCount")
    categories: Optional[List[str]] = None
    image_links: Optional[ImageLinks] = Field(default=None, alias="imageLinks")
    language: Optional[str] = None
    preview_link: Optional[str] = Field(default=None, alias="previewLink")
    info_link: Optional[str] = Field(default=None, alias="infoLink")
    industry_identifiers: Optional[List[IndustryIdentifier]] = Field(default=None, alias="industryIdentifiers")


class BookItem(Payload):
    volume_info: VolumeInfo = Field(alias="volumeInfo")


class GoogleBooksResponse(Payload):
    total_items: int = Field(default=0, alias="totalItems")
    items: Optional[List[BookItem]] = None


class GoogleBooksEngine(BaseLookupEngine):

    NAME = "Google Books"
    PRIORITY = 1
    CATEGORY = ProductCategory.BOOK

    BASE_URL = "https://www.googleapis.com/books/v1/volumes"

    def supports(self, barcode: str) -> bool:
        return is_isbn(barcode)

    async def _lookup(self, barcode: str) -> LookupResult:
        isbn = normalize_isbn(barcode)
        status, data = await self.http.get_json(
            self.BASE_URL,
            params={"q": f"isbn:{isbn}"},
            engine=self.name,
        )
        if status == 404 or data is None:
            return self.not_found()

        response = parse_payload(GoogleBooksResponse, data, engine=self.name)
        if response.total_items <= 0 or not response.items:
            return self.not_found()

        return self.found(self.map_volume(barcode, response.items[0].volume_info))

    def map_volume(self, barcode: str, volume: VolumeInfo) -> ProductInfo:
        # Incomplete entries are skipped, not fatal
        identifiers = {
            identifier.type: identifier.identifier
            for identifier in volume.industry_identifiers or []
            if identifier.type and identifier.identifier
        }
        title = clean_text(volume.title)
        publisher = clean_text(volume.publisher)
        image = volume.image_links.thumbnail if volume.image_links else None

        return ProductInfo(
            barcode=barcode,
            source=self.name,
            category=self.category,
            name=title,
            brand=publisher,
            description=clean_text(volume.description),
            image_url=secure_url(image),
            book=BookData(
                title=title,
                authors=flatten_names(volume.authors),
                publisher=publisher,
                published_date=clean_text(volume.published_date),
                page_count=volume.page_count,
                categories=flatten_names(volume.categories),
                isbn10=clean_text(identifiers.get("ISBN_10")),
                isbn13=clean_text(identifiers.get("ISBN_13")),
                preview_link=secure_url(volume.preview_link),
                info_link=secure_url(volume.info_link),
                language=clean_text(volume.language),
            ),
            raw_metadata=build_metadata(subtitle=volume.subtitle),
        )

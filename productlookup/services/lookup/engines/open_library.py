"""
Open Library engine, fallback book catalog behind Google Books.

API Documentation : https://openlibrary.org/dev/docs/api/books
Supports : ISBN-10, ISBN-13

The ``jscmd=data`` response is keyed by bibkey and its inner shape varies
a lot between records, so it is read as a plain mapping instead of a DTO.
"""

from typing import Any, Dict

from ..classifier import is_isbn, normalize_isbn
from ..interfaces import (
    BookData,
    LookupPayloadError,
    LookupResult,
    ProductCategory,
    ProductInfo,
)
from ..normalization import (
    build_metadata,
    clean_text,
    first_or_none,
    flatten_names,
    secure_url,
    to_int,
)
from .base import BaseLookupEngine


class OpenLibraryEngine(BaseLookupEngine):

    NAME = "Open Library"
    PRIORITY = 2
    CATEGORY = ProductCategory.BOOK

    BASE_URL = "https://openlibrary.org/api/books"

    def supports(self, barcode: str) -> bool:
        return is_isbn(barcode)

    async def _lookup(self, barcode: str) -> LookupResult:
        isbn = normalize_isbn(barcode)
        bibkey = f"ISBN:{isbn}"

        status, data = await self.http.get_json(
            self.BASE_URL,
            params={"bibkeys": bibkey, "format": "json", "jscmd": "data"},
            engine=self.name,
        )
        if status == 404 or data is None:
            return self.not_found()

        if not isinstance(data, dict):
            raise LookupPayloadError("Expected a JSON object", engine=self.name, barcode=barcode)

        # Unknown ISBNs come back as an empty object
        book = data.get(bibkey)
        if not isinstance(book, dict):
            return self.not_found()

        return self.found(self.map_book(barcode, isbn, book))

    def map_book(self, barcode: str, isbn: str, book: Dict[str, Any]) -> ProductInfo:
        title = clean_text(book.get("title"))
        publishers = flatten_names(book.get("publishers"))
        publisher = first_or_none(publishers)
        cover = book.get("cover") if isinstance(book.get("cover"), dict) else {}

        return ProductInfo(
            barcode=barcode,
            source=self.name,
            category=self.category,
            name=title,
            brand=publisher,
            description=None,
            image_url=secure_url(cover.get("medium")),
            book=BookData(
                title=title,
                authors=flatten_names(book.get("authors")),
                publisher=publisher,
                published_date=clean_text(book.get("publish_date")),
                page_count=to_int(book.get("number_of_pages")),
                categories=flatten_names(book.get("subjects")),
                isbn10=isbn if len(isbn) == 10 else None,
                isbn13=isbn if len(isbn) == 13 else None,
                preview_link=None,
                info_link=secure_url(book.get("url")),
                language=None,
            ),
            raw_metadata=build_metadata(
                subtitle=book.get("subtitle"),
                key=book.get("key"),
            ),
        )

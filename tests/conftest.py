"""
Test configuration and fixtures for the lookup service.
Provides scriptable fake engines and upstream payload fixtures.
"""

import asyncio
from typing import Callable, List, Optional
from unittest.mock import AsyncMock, Mock

import pytest

from productlookup.services.lookup import (
    BookData,
    Error,
    Found,
    ILookupEngine,
    LookupHttpClient,
    LookupResult,
    NotFound,
    ProductCategory,
    ProductInfo,
)


def make_book(barcode: str, source: str, title: str = "Sapiens") -> ProductInfo:
    return ProductInfo(
        barcode=barcode,
        source=source,
        category=ProductCategory.BOOK,
        name=title,
        book=BookData(title=title, authors=["Yuval Noah Harari"]),
    )


class FakeEngine(ILookupEngine):
    """
    Engine with a scripted outcome.

    ``outcome`` is one of "found", "not_found", "error", "raise", "hang".
    Every lookup call is recorded in ``calls``.
    """

    def __init__(self,
                 name: str,
                 priority: int,
                 outcome: str = "not_found",
                 category: ProductCategory = ProductCategory.BOOK,
                 accepts: Optional[Callable[[str], bool]] = None,
                 title: Optional[str] = None,
                 delay: float = 0.0,
                 log: Optional[List[str]] = None):
        self._name = name
        self._priority = priority
        self._category = category
        self.outcome = outcome
        self.accepts = accepts or (lambda barcode: True)
        self.title = title or f"Product from {name}"
        self.delay = delay
        self.calls: List[str] = []
        self.log = log

    @property
    def name(self) -> str:
        return self._name

    @property
    def priority(self) -> int:
        return self._priority

    @property
    def category(self) -> ProductCategory:
        return self._category

    def supports(self, barcode: str) -> bool:
        return self.accepts(barcode)

    async def lookup(self, barcode: str) -> LookupResult:
        self.calls.append(barcode)
        if self.log is not None:
            self.log.append(self.name)
        if self.delay:
            await asyncio.sleep(self.delay)

        if self.outcome == "found":
            return Found(product=make_book(barcode, self.name, self.title), source=self.name)
        if self.outcome == "error":
            return Error(source=self.name, cause=ConnectionError("upstream unreachable"))
        if self.outcome == "raise":
            raise RuntimeError("engine bug")
        if self.outcome == "hang":
            await asyncio.sleep(3600)
        return NotFound(source=self.name)


@pytest.fixture
def fake_engine():
    """Factory fixture for FakeEngine."""
    return FakeEngine


@pytest.fixture
def http_client():
    """LookupHttpClient whose get_json is an AsyncMock."""
    client = Mock(spec=LookupHttpClient)
    client.get_json = AsyncMock()
    return client


@pytest.fixture
def off_food_payload():
    """Open Food Facts v2 product response."""
    return {
        "code": "3017620422003",
        "status": 1,
        "status_verbose": "product found",
        "product": {
            "product_name": "Nutella",
            "brands": "Ferrero",
            "image_front_url": "http://images.openfoodfacts.org/images/products/301/762/042/2003/front_en.jpg",
            "nutriscore_grade": "e",
            "nova_group": 4,
            "ingredients_text": "Sugar, palm oil, hazelnuts 13%, skimmed milk powder 8.7%, fat-reduced cocoa 7.4%",
            "allergens_tags": ["en:milk", "en:nuts", "en:soybeans"],
            "serving_size": "15 g",
            "quantity": "400 g",
            "categories": "Spreads, Sweet spreads, Cocoa and hazelnuts spreads",
            "nutriments": {
                "energy-kcal_100g": 539,
                "fat_100g": 30.9,
                "carbohydrates_100g": 57.5,
                "proteins_100g": 6.3,
                "sugars_100g": 56.3,
                "salt_100g": 0.107,
                "fiber_100g": 0,
            },
            "some_field_added_next_year": {"nested": True},
        },
    }


@pytest.fixture
def google_books_payload():
    """Google Books volumes search response for Sapiens."""
    return {
        "kind": "books#volumes",
        "totalItems": 1,
        "items": [
            {
                "kind": "books#volume",
                "id": "1EiJAwAAQBAJ",
                "volumeInfo": {
                    "title": "Sapiens",
                    "subtitle": "A Brief History of Humankind",
                    "authors": ["Yuval Noah Harari"],
                    "publisher": "Harper",
                    "publishedDate": "2015-02-10",
                    "description": "From a renowned historian comes a groundbreaking narrative of humanity.",
                    "industryIdentifiers": [
                        {"type": "ISBN_13", "identifier": "9780062316097"},
                        {"type": "ISBN_10", "identifier": "0062316095"},
                    ],
                    "pageCount": 464,
                    "categories": ["History"],
                    "imageLinks": {
                        "smallThumbnail": "http://books.google.com/books/content?id=1EiJAwAAQBAJ&zoom=5",
                        "thumbnail": "http://books.google.com/books/content?id=1EiJAwAAQBAJ&zoom=1",
                    },
                    "language": "en",
                    "previewLink": "http://books.google.com/books?id=1EiJAwAAQBAJ",
                    "infoLink": "https://play.google.com/store/books/details?id=1EiJAwAAQBAJ",
                    "readingModes": {"text": True, "image": True},
                },
            }
        ],
    }


@pytest.fixture
def open_library_payload():
    """Open Library jscmd=data response keyed by bibkey."""
    return {
        "ISBN:9780143127741": {
            "url": "http://openlibrary.org/books/OL26885213M/Sapiens",
            "key": "/books/OL26885213M",
            "title": "Sapiens",
            "authors": [
                {"url": "https://openlibrary.org/authors/OL6869342A", "name": "Yuval Noah Harari"},
            ],
            "publishers": [{"name": "Penguin Books"}],
            "publish_date": "2018",
            "number_of_pages": 512,
            "subjects": [],
            "cover": {
                "small": "http://covers.openlibrary.org/b/id/8406786-S.jpg",
                "medium": "http://covers.openlibrary.org/b/id/8406786-M.jpg",
            },
        }
    }


@pytest.fixture
def openfda_payload():
    """OpenFDA drug label search response."""
    return {
        "meta": {"results": {"skip": 0, "limit": 1, "total": 1}},
        "results": [
            {
                "effective_time": "20230101",
                "active_ingredient": ["Active ingredient (in each tablet) Ibuprofen 200 mg"],
                "warnings": ["Allergy alert: Ibuprofen may cause a severe allergic reaction."],
                "indications_and_usage": ["Uses temporarily relieves minor aches and pains"],
                "description": ["x" * 800],
                "openfda": {
                    "brand_name": ["Advil"],
                    "generic_name": ["IBUPROFEN"],
                    "manufacturer_name": ["Haleon US Holdings LLC"],
                    "dosage_form": ["TABLET, COATED"],
                    "route": ["ORAL"],
                    "product_ndc": ["0573-0164"],
                    "upc": ["0305730164303"],
                },
            }
        ],
    }


@pytest.fixture
def obf_payload():
    """Open Beauty Facts product response."""
    return {
        "status": 1,
        "product": {
            "product_name": "Hydrating Cleanser",
            "brands": "CeraVe",
            "image_front_url": "https://images.openbeautyfacts.org/images/products/330/149/900/1010/front_en.jpg",
            "ingredients_text": "Aqua, Glycerin, Cetearyl Alcohol",
            "allergens_tags": [],
            "labels_tags": ["en:fragrance-free"],
            "categories_tags": ["en:cleansers", "en:face-cleansers"],
        },
    }

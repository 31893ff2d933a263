"""
OpenFDA drug label engine.

API Documentation : https://open.fda.gov/apis/drug/label/
Supports : NDC codes, including NDCs embedded in UPC/GTIN barcodes
Data : brand/generic name, active ingredients, warnings, dosage, manufacturer

OpenFDA is free and needs no API key. It answers an unmatched search with
HTTP 404, which is treated as a confirmed miss for that query key. A failed
query key (HTTP error, bad payload) does not stop the next key from being
tried; the engine only reports an error when no key gave a usable answer.
"""

from typing import List, Optional, Tuple

import structlog

from ..classifier import digits_only, is_isbn13, is_ndc_candidate
from ..interfaces import LookupResult, LookupServiceError, MedicineData, ProductCategory, ProductInfo
from ..normalization import build_metadata, clean_text, first_or_none, flatten_names, truncate
from .base import BaseLookupEngine, Payload, parse_payload

logger = structlog.get_logger(__name__)

DESCRIPTION_LIMIT = 500


class OpenFDAData(Payload):
    brand_name: Optional[List[str]] = None
    generic_name: Optional[List[str]] = None
    manufacturer_name: Optional[List[str]] = None
    dosage_form: Optional[List[str]] = None
    route: Optional[List[str]] = None
    product_ndc: Optional[List[str]] = None
    product_type: Optional[List[str]] = None


class DrugLabel(Payload):
    spl_product_data_elements: Optional[List[str]] = None
    description: Optional[List[str]] = None
    active_ingredient: Optional[List[str]] = None
    warnings: Optional[List[str]] = None
    contraindications: Optional[List[str]] = None
    indications_and_usage: Optional[List[str]] = None
    effective_time: Optional[str] = None
    openfda: Optional[OpenFDAData] = None


class OpenFDAResponse(Payload):
    results: Optional[List[DrugLabel]] = None


class OpenFDAEngine(BaseLookupEngine):
    """Drug labels; after food, before cosmetics."""

    NAME = "OpenFDA"
    PRIORITY = 3
    CATEGORY = ProductCategory.MEDICINE

    BASE_URL = "https://api.fda.gov/drug/label.json"

    # Tried in order against the same service
    SEARCH_FIELDS: Tuple[str, ...] = ("openfda.upc", "openfda.package_ndc")

    def supports(self, barcode: str) -> bool:
        # Every numeric code of plausible length is tried, OpenFDA decides
        return is_ndc_candidate(barcode) and not is_isbn13(barcode)

    async def _lookup(self, barcode: str) -> LookupResult:
        code = digits_only(barcode)
        last_error: Optional[LookupServiceError] = None
        answered = False

        for search_field in self.SEARCH_FIELDS:
            try:
                label = await self._search(search_field, code)
            except LookupServiceError as e:
                logger.warning(
                    "OpenFDA query key failed",
                    barcode=barcode,
                    search_field=search_field,
                    error=str(e),
                )
                last_error = e
                continue

            answered = True
            if label is not None:
                return self.found(self.map_label(barcode, label, search_field))

        if not answered and last_error is not None:
            raise last_error
        return self.not_found()

    async def _search(self, search_field: str, code: str) -> Optional[DrugLabel]:
        """First label matching ``search_field``, None on a confirmed miss."""
        status, data = await self.http.get_json(
            self.BASE_URL,
            params={"search": f'{search_field}:"{code}"', "limit": 1},
            engine=self.name,
        )
        if status == 404 or data is None:
            return None

        response = parse_payload(OpenFDAResponse, data, engine=self.name)
        return response.results[0] if response.results else None

    def map_label(self, barcode: str, label: DrugLabel, matched_on: str) -> ProductInfo:
        openfda = label.openfda or OpenFDAData()
        manufacturer = first_or_none(openfda.manufacturer_name)

        return ProductInfo(
            barcode=barcode,
            source=self.name,
            category=self.category,
            name=first_or_none(openfda.brand_name) or first_or_none(label.spl_product_data_elements),
            brand=manufacturer,
            description=truncate(first_or_none(label.description), DESCRIPTION_LIMIT),
            # OpenFDA has no product images
            image_url=None,
            medicine=MedicineData(
                generic_name=first_or_none(openfda.generic_name),
                active_ingredients=flatten_names(label.active_ingredient),
                dosage_form=first_or_none(openfda.dosage_form),
                route=first_or_none(openfda.route),
                manufacturer=manufacturer,
                warnings=flatten_names(label.warnings),
                contraindications=flatten_names(label.contraindications),
                indications=first_or_none(label.indications_and_usage),
                fda_approval_date=None,
                is_recalled=False,
            ),
            raw_metadata=build_metadata(
                matched_on=matched_on,
                product_ndc=openfda.product_ndc,
                product_type=first_or_none(openfda.product_type),
                effective_time=clean_text(label.effective_time),
            ),
        )

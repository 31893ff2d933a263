"""
Concrete lookup engines, one per remote catalog.
"""

from .base import BaseLookupEngine, OpenFactsEngine
from .google_books import GoogleBooksEngine
from .open_library import OpenLibraryEngine
from .openbeautyfacts import OpenBeautyFactsEngine
from .openfda import OpenFDAEngine
from .openfoodfacts import OpenFoodFactsEngine
from .openpetfoodfacts import OpenPetFoodFactsEngine

# Registration order of the default registry
DEFAULT_ENGINES = (
    OpenFoodFactsEngine,
    GoogleBooksEngine,
    OpenLibraryEngine,
    OpenFDAEngine,
    OpenBeautyFactsEngine,
    OpenPetFoodFactsEngine,
)

__all__ = [
    "BaseLookupEngine",
    "OpenFactsEngine",
    "GoogleBooksEngine",
    "OpenLibraryEngine",
    "OpenBeautyFactsEngine",
    "OpenFDAEngine",
    "OpenFoodFactsEngine",
    "OpenPetFoodFactsEngine",
    "DEFAULT_ENGINES",
]

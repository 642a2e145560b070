"""In-memory merchant and product catalog.

The catalog is hardcoded and read-only at runtime. Each product belongs
to exactly one merchant and carries its own price, cost and profit.
"""

from dataclasses import dataclass
from decimal import Decimal

from market.schemas import MerchantSchema, ProductSchema


# ============================================================================
# Catalog Entities
# ============================================================================


@dataclass(frozen=True)
class Merchant:
    """Seller owning a subset of the products."""

    id: str
    name: str
    location: str
    profit_weight: float


@dataclass(frozen=True)
class Product:
    """Catalog product. Money fields are exact decimals."""

    id: str
    merchant_id: str
    title: str
    category: str
    price: Decimal
    cost: Decimal
    profit: Decimal
    currency: str
    image_url: str


# ============================================================================
# Seed Data
# ============================================================================

MERCHANTS = [
    Merchant(id="mkt-1", name="Karlı Market", location="İstanbul", profit_weight=1.2),
    Merchant(id="mkt-2", name="Ucuz Market", location="Ankara", profit_weight=0.8),
]

PRODUCTS = [
    Product(
        id="P-001",
        merchant_id="mkt-1",
        title="Pınar Süt 1L",
        category="sut-kahvaltilik",
        price=Decimal("39.9"),
        cost=Decimal("30"),
        profit=Decimal("9.9"),
        currency="TRY",
        image_url="https://via.placeholder.com/300x200?text=Pinar+Sut",
    ),
    Product(
        id="P-002",
        merchant_id="mkt-2",
        title="Torku Süt 1L",
        category="sut-kahvaltilik",
        price=Decimal("35.5"),
        cost=Decimal("28"),
        profit=Decimal("7.5"),
        currency="TRY",
        image_url="https://via.placeholder.com/300x200?text=Torku+Sut",
    ),
    Product(
        id="P-003",
        merchant_id="mkt-1",
        title="Sütaş Beyaz Peynir 500g",
        category="sut-kahvaltilik",
        price=Decimal("89.0"),
        cost=Decimal("70"),
        profit=Decimal("19.0"),
        currency="TRY",
        image_url="https://via.placeholder.com/300x200?text=Sutas+Peynir",
    ),
    Product(
        id="P-004",
        merchant_id="mkt-1",
        title="Tereyağı 250g",
        category="sut-kahvaltilik",
        price=Decimal("62.0"),
        cost=Decimal("45.0"),
        profit=Decimal("17.0"),
        currency="TRY",
        image_url="https://via.placeholder.com/300x200?text=Tereyagi",
    ),
    Product(
        id="P-005",
        merchant_id="mkt-2",
        title="Yarım Yağlı Süt 1L",
        category="sut-kahvaltilik",
        price=Decimal("31.5"),
        cost=Decimal("26.0"),
        profit=Decimal("5.5"),
        currency="TRY",
        image_url="https://via.placeholder.com/300x200?text=Yarim+Yagli+Sut",
    ),
]


# ============================================================================
# Catalog
# ============================================================================


class Catalog:
    """Read-only lookup over merchants and products.

    Listing order always follows the seed order, which callers rely on
    to break ties deterministically.
    """

    def __init__(
        self,
        merchants: list[Merchant] | None = None,
        products: list[Product] | None = None,
    ) -> None:
        """Initialize catalog.

        Args:
            merchants: Merchants to serve. Defaults to the seed merchants.
            products: Products to serve. Defaults to the seed products.
        """
        self._merchants = list(MERCHANTS if merchants is None else merchants)
        self._products = list(PRODUCTS if products is None else products)
        self._by_id = {p.id: p for p in self._products}

    def list_merchants(self) -> list[Merchant]:
        """Return every merchant, unfiltered."""
        return list(self._merchants)

    def list_products(
        self,
        query: str | None = None,
        merchant_id: str | None = None,
    ) -> list[Product]:
        """List products matching a search query.

        Args:
            query: Case-insensitive substring matched against title or
                category. Empty or None matches everything.
            merchant_id: Exact merchant filter.

        Returns:
            Matching products in catalog order.
        """
        items = self._products

        if merchant_id:
            items = [p for p in items if p.merchant_id == merchant_id]

        if query:
            needle = query.lower()
            items = [
                p
                for p in items
                if needle in p.title.lower() or needle in p.category.lower()
            ]

        return list(items)

    def get_product(self, product_id: str) -> Product | None:
        """Get product by ID, or None if it is not in the catalog."""
        return self._by_id.get(product_id)

    @staticmethod
    def merchant_to_schema(merchant: Merchant) -> MerchantSchema:
        return MerchantSchema(
            id=merchant.id,
            name=merchant.name,
            location=merchant.location,
            profit_weight=merchant.profit_weight,
        )

    @staticmethod
    def product_to_schema(product: Product) -> ProductSchema:
        return ProductSchema(
            id=product.id,
            merchant_id=product.merchant_id,
            title=product.title,
            category=product.category,
            price=float(product.price),
            cost=float(product.cost),
            profit=float(product.profit),
            currency=product.currency,
            image_url=product.image_url,
        )


# Global catalog instance
_catalog: Catalog | None = None


def get_catalog() -> Catalog:
    """Get or create the catalog instance.

    Returns:
        Catalog instance.
    """
    global _catalog
    if _catalog is None:
        _catalog = Catalog()
    return _catalog

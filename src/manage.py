"""Furnishop database management CLI.

Usage:
    python src/manage.py setup-db         # Create all tables
    python src/manage.py drop-db          # Drop all tables
    python src/manage.py seed-catalogue   # Add demo products, print variant ids
"""

import argparse
import sys

from ordering.domain import ordering
from ordering.utils.db import drop_db, setup_db

_DEMO_CATALOGUE = [
    # (product, base price, [(variant, price adjustment)])
    ("Oslo Three-Seater Sofa", 24000.0, [("Grey Linen", 0.0), ("Olive Velvet", 1500.0)]),
    ("Nile Oak Dining Table", 18500.0, [("Six Seats", 0.0), ("Eight Seats", 4000.0)]),
    ("Luxor Bedside Table", 3200.0, [("Walnut", 0.0), ("White", 0.0)]),
]


def setup_databases():
    print("Initializing ordering domain...")
    ordering.init()
    providers = setup_db(ordering)
    if not providers:
        print("  No SQL database configured (set PROTEAN_ENV=production); nothing to create.")
        return
    print(f"  Tables created on: {', '.join(providers)}")


def drop_databases():
    print("Initializing ordering domain...")
    ordering.init()
    providers = drop_db(ordering)
    if not providers:
        print("  No SQL database configured; nothing to drop.")
        return
    print(f"  Tables dropped on: {', '.join(providers)}")


def seed_catalogue(stock: int):
    from ordering.catalogue.product import Product, ProductVariant

    ordering.init()
    variant_ids = []
    with ordering.domain_context():
        products = ordering.repository_for(Product)
        variants = ordering.repository_for(ProductVariant)
        for product_name, base_price, variant_specs in _DEMO_CATALOGUE:
            product = Product(name=product_name, base_price=base_price)
            products.add(product)
            for variant_name, adjustment in variant_specs:
                variant = ProductVariant(
                    product_id=product.id,
                    name=variant_name,
                    price_adjustment=adjustment,
                    stock=stock,
                )
                variants.add(variant)
                variant_ids.append(str(variant.id))
            print(f"  {product_name}: {len(variant_specs)} variants")

    print(",".join(variant_ids))


def main():
    parser = argparse.ArgumentParser(description="Furnishop database management")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")
    seed_parser = subparsers.add_parser("seed-catalogue", help="Add demo products and print their variant ids")
    seed_parser.add_argument("--stock", type=int, default=1000, help="Units in stock per variant")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_databases()
    elif args.command == "drop-db":
        drop_databases()
    elif args.command == "seed-catalogue":
        seed_catalogue(args.stock)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()

"""Generate a fake product catalog and user list for development.

Writes ``data/products.json`` and ``data/users.json`` in the formats the
training pipeline reads.

Example:
    Run the script directly to generate default data:
        $ python scripts/generate_fake_data.py

    Or import and use programmatically:
        from scripts.generate_fake_data import generate_fake_catalog
        products = generate_fake_catalog(num_products=20)
"""

import json
import random
from pathlib import Path
from typing import Any, Dict, List, Optional

# Default configuration constants
DEFAULT_NUM_USERS = 50
DEFAULT_NUM_PRODUCTS = 30
DEFAULT_MAX_PURCHASES = 5
DEFAULT_COLD_START_SHARE = 0.2
DEFAULT_SEED = 42

COLORS = ["black", "white", "red", "blue", "green", "gray"]
CATEGORIES = ["shoes", "shirts", "pants", "jackets", "hats", "bags"]
MIN_AGE, MAX_AGE = 16, 70


def generate_fake_catalog(
    num_products: int = DEFAULT_NUM_PRODUCTS,
    rng: Optional[random.Random] = None,
) -> List[Dict[str, Any]]:
    """Generate product records with name, price, color and category.

    Raises:
        ValueError: If num_products is not positive.
    """
    if num_products <= 0:
        raise ValueError("num_products must be positive")
    rng = rng or random.Random(DEFAULT_SEED)

    products = []
    for idx in range(1, num_products + 1):
        category = rng.choice(CATEGORIES)
        products.append({
            "id": idx,
            "name": f"{category.title()} #{idx}",
            "price": round(rng.uniform(5, 250), 2),
            "color": rng.choice(COLORS),
            "category": category,
        })
    return products


def generate_fake_users(
    products: List[Dict[str, Any]],
    num_users: int = DEFAULT_NUM_USERS,
    max_purchases: int = DEFAULT_MAX_PURCHASES,
    cold_start_share: float = DEFAULT_COLD_START_SHARE,
    rng: Optional[random.Random] = None,
) -> List[Dict[str, Any]]:
    """Generate users whose purchases reference catalog products by name.

    Younger users lean toward the first half of the category list so the
    average buyer age differs between products.

    Raises:
        ValueError: If num_users is not positive or products is empty.
    """
    if num_users <= 0:
        raise ValueError("num_users must be positive")
    if not products:
        raise ValueError("products must not be empty")
    rng = rng or random.Random(DEFAULT_SEED)

    young = [p for p in products if p["category"] in CATEGORIES[:3]] or products
    older = [p for p in products if p["category"] in CATEGORIES[3:]] or products

    users = []
    for idx in range(1, num_users + 1):
        age = rng.randint(MIN_AGE, MAX_AGE)
        purchases = []
        if rng.random() >= cold_start_share:
            pool = young if age < 35 else older
            count = rng.randint(1, max_purchases)
            purchases = [
                {"name": product["name"]}
                for product in rng.sample(pool, min(count, len(pool)))
            ]
        users.append({"id": idx, "name": f"User {idx}", "age": age, "purchases": purchases})
    return users


def main() -> None:
    """Generate default data and save it under data/."""
    rng = random.Random(DEFAULT_SEED)

    print(f"Generating {DEFAULT_NUM_PRODUCTS} products and {DEFAULT_NUM_USERS} users...")
    products = generate_fake_catalog(rng=rng)
    users = generate_fake_users(products, rng=rng)

    data_dir = Path(__file__).parent.parent / "data"
    data_dir.mkdir(exist_ok=True)

    (data_dir / "products.json").write_text(json.dumps(products, indent=2))
    (data_dir / "users.json").write_text(json.dumps(users, indent=2))

    with_history = sum(1 for user in users if user["purchases"])
    print(f"\nData generated successfully!")
    print(f"Saved to: {data_dir}")
    print(f"  Products: {len(products)}")
    print(f"  Users: {len(users)} ({with_history} with purchases)")


if __name__ == "__main__":
    main()

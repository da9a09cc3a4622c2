"""Placeholder menu shown to customers when the real catalog can't be read."""
from decimal import Decimal

FALLBACK_MENU_ITEMS = [
    {
        "id": "fallback-1",
        "name": "Truffle Arancini",
        "description": "Crispy risotto balls filled with truffle and parmesan, served with garlic aioli",
        "price": Decimal("14.99"),
        "category": "Appetizers",
        "is_available": True,
        "prep_time": 12,
        "image_url": "/images/truffle-arancini.jpg",
    },
    {
        "id": "fallback-2",
        "name": "Tuna Tartare",
        "description": "Fresh yellowfin tuna with avocado, cucumber, and sesame ginger dressing",
        "price": Decimal("18.99"),
        "category": "Appetizers",
        "is_available": True,
        "prep_time": 8,
        "image_url": "/images/tuna-tartare.jpg",
    },
    {
        "id": "fallback-3",
        "name": "Grilled Atlantic Salmon",
        "description": "Pan-seared salmon with lemon herb butter, roasted vegetables, and quinoa",
        "price": Decimal("28.99"),
        "category": "Main Courses",
        "is_available": True,
        "prep_time": 18,
        "image_url": "/images/grilled-salmon.jpg",
    },
    {
        "id": "fallback-4",
        "name": "Ribeye Steak",
        "description": "Premium 12oz ribeye with garlic mashed potatoes and seasonal vegetables",
        "price": Decimal("42.99"),
        "category": "Main Courses",
        "is_available": True,
        "prep_time": 22,
        "image_url": "/images/ribeye-steak.jpg",
    },
    {
        "id": "fallback-5",
        "name": "Mushroom Risotto",
        "description": "Creamy arborio rice with wild mushrooms, truffle oil, and aged parmesan",
        "price": Decimal("24.99"),
        "category": "Main Courses",
        "is_available": False,
        "prep_time": 25,
        "image_url": None,
    },
    {
        "id": "fallback-6",
        "name": "Chocolate Lava Cake",
        "description": "Warm chocolate cake with molten center, vanilla ice cream, and berry coulis",
        "price": Decimal("12.99"),
        "category": "Desserts",
        "is_available": True,
        "prep_time": 15,
        "image_url": None,
    },
    {
        "id": "fallback-7",
        "name": "Tiramisu",
        "description": "Classic Italian dessert with mascarpone, espresso, and cocoa powder",
        "price": Decimal("10.99"),
        "category": "Desserts",
        "is_available": True,
        "prep_time": 5,
        "image_url": None,
    },
    {
        "id": "fallback-8",
        "name": "Craft Beer Selection",
        "description": "Local IPA, Lager, or Seasonal ale",
        "price": Decimal("7.99"),
        "category": "Beverages",
        "is_available": True,
        "prep_time": 2,
        "image_url": None,
    },
    {
        "id": "fallback-9",
        "name": "House Wine",
        "description": "Red or white wine selection by the glass",
        "price": Decimal("9.99"),
        "category": "Beverages",
        "is_available": True,
        "prep_time": 2,
        "image_url": None,
    },
]

# Demo floor plan: (table_number, capacity)
DEMO_TABLES = [
    (1, 2), (2, 4), (3, 4), (4, 6), (5, 4), (6, 2),
    (7, 8), (8, 4), (9, 2), (10, 4), (11, 6), (12, 4),
]

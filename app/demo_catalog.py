"""
데모 카탈로그

판매자 2(전자제품), 3(패션), 4(리빙)의 상품/카테고리/변형 데이터.
CLI `seed-demo` 와 테스트 픽스처가 같은 데이터를 사용합니다.
created_at은 기준 시각(anchor)으로부터의 경과 일수로 지정되어 결과가 결정적입니다.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy.orm import Session

from app.models import Category, Product, ProductOption, ProductOptionValue, ProductVariant, VariantOptionValue

logger = logging.getLogger(__name__)

DEMO_ANCHOR = datetime(2025, 1, 1, tzinfo=timezone.utc)

# (id, name, parent_id, description, seller_id, is_active)
CATEGORIES = [
    (1, "Electronics", None, "Electronic devices and accessories", None, True),
    (2, "Fashion", None, "Clothing, shoes, and accessories", None, True),
    (3, "Home & Living", None, "Furniture and home decor", None, True),
    (4, "Smartphones", 1, "Mobile phones and accessories", None, True),
    (5, "Laptops", 1, "Laptops and notebook computers", None, True),
    (6, "Headphones", 1, "Audio devices and headphones", None, True),
    (7, "Men's Clothing", 2, "Clothing for men", None, True),
    (8, "Women's Clothing", 2, "Clothing for women", None, True),
    (9, "Footwear", 2, "Shoes and sandals", None, True),
    (10, "Furniture", 3, "Home and office furniture", None, True),
    (11, "Bedding", 3, "Bedsheets, pillows, and mattresses", None, True),
    (12, "Tablets", 1, "Tablet computers and accessories", None, True),
    (13, "Smartwatches", 1, "Wearable smart devices", None, True),
    (14, "Cameras", 1, "Digital cameras and photography equipment", None, True),
    (15, "Gaming", 1, "Gaming consoles and accessories", None, True),
    (16, "Audio Systems", 1, "Speakers and audio equipment", None, True),
    (17, "Android Phones", 4, "Android smartphones", None, True),
    (18, "iOS Phones", 4, "Apple iPhones", None, True),
    # 판매자 전용/비활성 카테고리: 다른 판매자의 탐색에는 보이지 않아야 함
    (19, "Seller 3 Picks", 1, "Curated electronics owned by seller 3", 3, True),
    (20, "Retired Phones", 4, "Inactive category", None, False),
]

# (id, seller_id, category_id, name, brand, base_sku, short_description, tags, age_days)
PRODUCTS = [
    (1, 2, 4, "iPhone 15 Pro", "Apple", "IPHONE-15-PRO", "Latest Apple smartphone", ["smartphone", "apple", "flagship", "premium"], 0),
    (2, 2, 4, "Samsung Galaxy S24", "Samsung", "SAMSUNG-S24", "Flagship Android smartphone", ["smartphone", "samsung", "android", "ai"], 0),
    (3, 2, 5, 'MacBook Pro 16"', "Apple", "MBP-16-M3", "Professional laptop", ["laptop", "apple", "professional", "creator"], 0),
    (4, 2, 6, "Sony WH-1000XM5", "Sony", "SONY-WH1000XM5", "Premium noise cancelling headphones", ["headphones", "sony", "wireless", "noise-cancelling"], 0),
    (5, 3, 7, "Classic Cotton T-Shirt", "Nike", "NIKE-TSHIRT-001", "Comfortable everyday t-shirt", ["tshirt", "casual", "cotton", "everyday"], 0),
    (6, 3, 8, "Summer Dress", "Zara", "ZARA-DRESS-001", "Elegant floral summer dress", ["dress", "summer", "casual", "floral"], 0),
    (7, 3, 9, "Running Shoes", "Adidas", "ADIDAS-RUN-001", "Lightweight running shoes", ["shoes", "sports", "running", "athletic"], 0),
    (8, 4, 10, "Modern Sofa Set", "IKEA", "IKEA-SOFA-001", "Contemporary 3-seater sofa", ["furniture", "sofa", "living-room", "modern"], 0),
    (9, 4, 11, "Memory Foam Mattress", "Casper", "CASPER-MATTRESS-Q", "Queen size memory foam mattress", ["mattress", "bedroom", "comfort", "sleep"], 0),
    (101, 2, 4, "iPhone 14", "Apple", "IPHONE-14", "Previous gen Apple phone", ["smartphone", "apple", "ios"], 60),
    (102, 2, 4, "iPhone 13", "Apple", "IPHONE-13", "Affordable Apple phone", ["smartphone", "apple", "ios", "budget"], 90),
    (103, 2, 4, "Samsung Galaxy S23", "Samsung", "SAMSUNG-S23", "Previous flagship", ["smartphone", "samsung", "android", "flagship"], 120),
    (104, 2, 4, "Samsung Galaxy A54", "Samsung", "SAMSUNG-A54", "Mid-range Samsung", ["smartphone", "samsung", "android", "midrange"], 45),
    (105, 2, 4, "Google Pixel 8", "Google", "PIXEL-8", "Latest Pixel phone", ["smartphone", "google", "android", "camera"], 30),
    (106, 2, 4, "Google Pixel 7", "Google", "PIXEL-7", "Previous Pixel", ["smartphone", "google", "android", "budget"], 150),
    (107, 2, 4, "OnePlus 11", "OnePlus", "ONEPLUS-11", "Flagship killer", ["smartphone", "oneplus", "android", "premium"], 75),
    (108, 2, 4, "Xiaomi 13 Pro", "Xiaomi", "XIAOMI-13", "Feature-packed phone", ["smartphone", "xiaomi", "android", "premium"], 50),
    (109, 2, 4, "Motorola Edge 40", "Motorola", "MOTO-EDGE-40", "Sleek design phone", ["smartphone", "motorola", "android"], 40),
    (110, 2, 4, "Nothing Phone 2", "Nothing", "NOTHING-2", "Unique design phone", ["smartphone", "nothing", "android", "unique"], 20),
    (111, 2, 5, "MacBook Air M2", "Apple", "MBA-M2", "Lightweight laptop", ["laptop", "apple", "portable", "student"], 35),
    (112, 2, 5, 'MacBook Pro 14"', "Apple", "MBP-14", "Compact pro laptop", ["laptop", "apple", "professional", "creator"], 25),
    (113, 2, 5, "Dell XPS 15", "Dell", "DELL-XPS-15", "Premium Windows laptop", ["laptop", "dell", "windows", "professional"], 55),
    (114, 2, 5, "Dell Inspiron 15", "Dell", "DELL-INS-15", "Budget laptop", ["laptop", "dell", "windows", "budget"], 100),
    (115, 2, 5, "HP Spectre x360", "HP", "HP-SPECTRE", "2-in-1 laptop", ["laptop", "hp", "windows", "convertible"], 70),
    (116, 2, 5, "Lenovo ThinkPad X1", "Lenovo", "LENOVO-X1", "Business laptop", ["laptop", "lenovo", "windows", "business"], 80),
    (117, 2, 5, "ASUS ROG Zephyrus", "ASUS", "ASUS-ROG", "Gaming laptop", ["laptop", "asus", "windows", "gaming"], 45),
    (118, 2, 5, "Acer Swift 3", "Acer", "ACER-SWIFT-3", "Lightweight laptop", ["laptop", "acer", "windows", "portable"], 90),
    (119, 2, 5, "Microsoft Surface Laptop 5", "Microsoft", "SURFACE-5", "Premium Surface", ["laptop", "microsoft", "windows", "premium"], 60),
    (120, 2, 5, "Razer Blade 15", "Razer", "RAZER-BLADE-15", "Gaming powerhouse", ["laptop", "razer", "windows", "gaming", "premium"], 30),
    (121, 2, 12, 'iPad Pro 12.9"', "Apple", "IPAD-PRO-129", "Pro tablet", ["tablet", "apple", "ios", "professional", "creator"], 40),
    (122, 2, 12, "iPad Air", "Apple", "IPAD-AIR", "Mid-tier iPad", ["tablet", "apple", "ios"], 50),
    (123, 2, 12, "iPad Mini", "Apple", "IPAD-MINI", "Compact tablet", ["tablet", "apple", "ios", "portable"], 70),
    (124, 2, 12, "Samsung Galaxy Tab S9", "Samsung", "TAB-S9", "Premium Android tablet", ["tablet", "samsung", "android", "premium"], 35),
    (125, 2, 12, "Samsung Galaxy Tab A8", "Samsung", "TAB-A8", "Budget tablet", ["tablet", "samsung", "android", "budget"], 80),
    (126, 2, 12, "Microsoft Surface Pro 9", "Microsoft", "SURFACE-PRO-9", "2-in-1 tablet", ["tablet", "microsoft", "windows", "convertible"], 55),
    (127, 2, 12, "Lenovo Tab P11", "Lenovo", "LENOVO-TAB-P11", "Entertainment tablet", ["tablet", "lenovo", "android"], 90),
    (128, 2, 12, "Amazon Fire HD 10", "Amazon", "FIRE-HD-10", "Budget tablet", ["tablet", "amazon", "android", "budget"], 120),
    (129, 2, 13, "Apple Watch Series 9", "Apple", "WATCH-9", "Latest Apple Watch", ["smartwatch", "apple", "ios", "fitness", "health"], 25),
    (130, 2, 13, "Apple Watch SE", "Apple", "WATCH-SE", "Affordable Apple Watch", ["smartwatch", "apple", "ios", "fitness", "budget"], 60),
    (131, 2, 13, "Samsung Galaxy Watch 6", "Samsung", "WATCH-6", "Premium Android watch", ["smartwatch", "samsung", "android", "fitness"], 40),
    (132, 2, 13, "Garmin Forerunner 265", "Garmin", "GARMIN-265", "Running watch", ["smartwatch", "garmin", "fitness", "running", "sports"], 50),
    (133, 2, 13, "Fitbit Versa 4", "Fitbit", "FITBIT-VERSA-4", "Fitness tracker", ["smartwatch", "fitbit", "fitness", "health"], 70),
    (134, 2, 13, "Amazfit GTR 4", "Amazfit", "AMAZFIT-GTR-4", "Budget smartwatch", ["smartwatch", "amazfit", "fitness", "budget"], 85),
    (135, 2, 6, "AirPods Pro 2", "Apple", "AIRPODS-PRO-2", "Premium earbuds", ["headphones", "apple", "wireless", "earbuds", "noise-cancelling"], 30),
    (136, 2, 6, "AirPods Max", "Apple", "AIRPODS-MAX", "Over-ear headphones", ["headphones", "apple", "wireless", "noise-cancelling", "premium"], 45),
    (137, 2, 6, "Sony WH-1000XM4", "Sony", "SONY-XM4", "Previous gen ANC", ["headphones", "sony", "wireless", "noise-cancelling"], 150),
    (138, 2, 6, "Bose QuietComfort 45", "Bose", "BOSE-QC45", "Bose ANC headphones", ["headphones", "bose", "wireless", "noise-cancelling"], 100),
    (139, 2, 6, "Sennheiser Momentum 4", "Sennheiser", "SENNHEISER-M4", "Audiophile headphones", ["headphones", "sennheiser", "wireless", "audiophile"], 65),
    (140, 2, 6, "Jabra Elite 85h", "Jabra", "JABRA-85H", "Business headphones", ["headphones", "jabra", "wireless", "business"], 120),
    (141, 2, 6, "Beats Studio Pro", "Beats", "BEATS-STUDIO-PRO", "Stylish headphones", ["headphones", "beats", "wireless", "style"], 55),
    (142, 2, 6, "Anker Soundcore Q30", "Anker", "ANKER-Q30", "Budget ANC", ["headphones", "anker", "wireless", "budget"], 90),
    (143, 2, 14, "Canon EOS R6", "Canon", "CANON-R6", "Professional mirrorless", ["camera", "canon", "mirrorless", "professional"], 40),
    (144, 2, 14, "Sony A7 IV", "Sony", "SONY-A7-4", "Hybrid camera", ["camera", "sony", "mirrorless", "professional"], 50),
    (145, 2, 14, "Nikon Z6 II", "Nikon", "NIKON-Z6-2", "All-rounder camera", ["camera", "nikon", "mirrorless"], 75),
    (146, 2, 14, "Fujifilm X-T5", "Fujifilm", "FUJI-XT5", "Retro design camera", ["camera", "fujifilm", "mirrorless", "retro"], 60),
    (147, 2, 14, "GoPro Hero 12", "GoPro", "GOPRO-12", "Action camera", ["camera", "gopro", "action", "sports"], 35),
    (148, 2, 18, "iPhone 12 (Older Model)", "Apple", "IPHONE-12-OLD", "Older model", ["smartphone", "apple", "ios"], 365),
    (149, 2, 17, "Samsung Note 20", "Samsung", "NOTE-20", "Samsung Note 20", ["smartphone", "samsung", "android"], 200),
    (150, 2, 17, "Budget Phone Lite", "Generic", "BUDGET-PHONE", "Ultra budget", ["smartphone", "android", "budget"], 180),
    (151, 2, 18, "Ultra Premium Fold Phone", "Samsung", "FOLD-ULTRA", "Foldable luxury", ["smartphone", "samsung", "android", "luxury", "premium"], 15),
    # 판매자 3 소유 스마트폰: 판매자 2의 결과에 절대 나타나면 안 됨
    (160, 3, 4, "Samsung Galaxy S23 (Reseller)", "Samsung", "RESELL-S23", "Reseller listing", ["smartphone", "samsung", "android", "flagship"], 10),
]

# product_id -> [(option name, display name, [(value, display name, color code)])]
OPTIONS = {
    1: [
        ("Color", "Color", [("Natural Titanium", "Natural Titanium", "#F5E6D3"), ("Blue Titanium", "Blue Titanium", "#5B8DBE"),
                            ("White Titanium", "White Titanium", "#F0F0F0"), ("Black Titanium", "Black Titanium", "#2C2C2C")]),
        ("Storage", "Storage Capacity", [("128GB", "128GB", None), ("256GB", "256GB", None), ("512GB", "512GB", None), ("1TB", "1TB", None)]),
    ],
    2: [
        ("Color", "Color", [("Onyx Black", "Onyx Black", "#000000"), ("Marble Gray", "Marble Gray", "#808080"),
                            ("Cobalt Violet", "Cobalt Violet", "#5E4FA2")]),
        ("Storage", "Storage Capacity", [("128GB", "128GB", None), ("256GB", "256GB", None), ("512GB", "512GB", None)]),
    ],
    3: [
        ("Color", "Color", [("Space Black", "Space Black", "#1C1C1E"), ("Silver", "Silver", "#C0C0C0")]),
        ("Memory", "RAM Memory", [("16GB", "16GB", None), ("32GB", "32GB", None), ("64GB", "64GB", None)]),
        ("Storage", "Storage Capacity", [("512GB", "512GB", None), ("1TB", "1TB", None), ("2TB", "2TB", None)]),
    ],
    4: [
        ("Color", "Color", [("Black", "Midnight Black", "#000000"), ("Silver", "Silver", "#C0C0C0")]),
    ],
    5: [
        ("Size", "Size", [("S", "Small", None), ("M", "Medium", None), ("L", "Large", None), ("XL", "Extra Large", None), ("XXL", "2X Large", None)]),
        ("Color", "Color", [("Black", "Black", "#000000"), ("White", "White", "#FFFFFF"), ("Navy", "Navy Blue", "#000080"), ("Gray", "Gray", "#808080")]),
    ],
    6: [
        ("Size", "Size", [("XS", "Extra Small", None), ("S", "Small", None), ("M", "Medium", None), ("L", "Large", None), ("XL", "Extra Large", None)]),
        ("Color", "Color", [("Floral Blue", "Floral Blue", "#4169E1"), ("Floral Pink", "Floral Pink", "#FFB6C1"), ("Solid White", "Solid White", "#FFFFFF")]),
    ],
    7: [
        ("Size", "Shoe Size", [("7", "Size 7", None), ("8", "Size 8", None), ("9", "Size 9", None), ("10", "Size 10", None),
                               ("11", "Size 11", None), ("12", "Size 12", None)]),
        ("Color", "Color", [("Black/White", "Black/White", None), ("Blue/Orange", "Blue/Orange", None), ("All Black", "All Black", "#000000")]),
    ],
    8: [
        ("Color", "Color", [("Gray", "Gray", "#808080"), ("Beige", "Beige", "#F5F5DC"), ("Navy Blue", "Navy Blue", "#000080")]),
        ("Material", "Material Type", [("Fabric", "Fabric", None), ("Velvet", "Velvet", None), ("Leather", "Leather", None)]),
    ],
    101: [
        ("Color", "Color", [("Black", "Black", None), ("White", "White", None)]),
        ("Storage", "Storage Capacity", [("128GB", "128GB", None), ("256GB", "256GB", None)]),
    ],
    105: [
        ("Color", "Color", [("Black", "Black", None), ("White", "White", None)]),
        ("Storage", "Storage Capacity", [("128GB", "128GB", None), ("256GB", "256GB", None)]),
    ],
    111: [
        ("Color", "Color", [("Black", "Black", None), ("White", "White", None)]),
        ("RAM", "RAM", [("8GB", "8GB", None), ("16GB", "16GB", None)]),
    ],
    121: [
        ("Color", "Color", [("Black", "Black", None), ("White", "White", None)]),
        ("Storage", "Storage Capacity", [("128GB", "128GB", None), ("256GB", "256GB", None)]),
    ],
    129: [
        ("Size", "Case Size", [("41mm", "41mm", None), ("45mm", "45mm", None)]),
        ("Band", "Band Type", [("Sport", "Sport", None), ("Leather", "Leather", None)]),
    ],
}

# (product_id, sku, price, allow_purchase, is_popular, is_default, {option name: value})
VARIANTS = [
    (1, "IPHONE-15-PRO-NAT-128", 999.00, True, True, True, {"Color": "Natural Titanium", "Storage": "128GB"}),
    (1, "IPHONE-15-PRO-NAT-256", 1099.00, True, False, False, {"Color": "Natural Titanium", "Storage": "256GB"}),
    (1, "IPHONE-15-PRO-BLU-128", 999.00, True, False, False, {"Color": "Blue Titanium", "Storage": "128GB"}),
    (1, "IPHONE-15-PRO-BLU-256", 1099.00, True, False, False, {"Color": "Blue Titanium", "Storage": "256GB"}),
    (2, "SAMSUNG-S24-BLK-128", 799.00, True, True, True, {"Color": "Onyx Black", "Storage": "128GB"}),
    (2, "SAMSUNG-S24-BLK-256", 899.00, True, False, False, {"Color": "Onyx Black", "Storage": "256GB"}),
    (3, "MBP-16-M3-SB-16-512", 2499.00, True, True, True, {"Color": "Space Black", "Memory": "16GB", "Storage": "512GB"}),
    (3, "MBP-16-M3-SLV-16-512", 2499.00, True, False, False, {"Color": "Silver", "Memory": "16GB", "Storage": "512GB"}),
    (4, "SONY-WH1000XM5-BLK", 399.99, True, True, True, {"Color": "Black"}),
    (4, "SONY-WH1000XM5-SLV", 399.99, True, False, False, {"Color": "Silver"}),
    (5, "NIKE-TSHIRT-BLK-M", 29.99, True, True, True, {"Size": "M", "Color": "Black"}),
    (5, "NIKE-TSHIRT-WHT-M", 29.99, True, False, False, {"Size": "M", "Color": "White"}),
    (5, "NIKE-TSHIRT-BLK-L", 29.99, True, False, False, {"Size": "L", "Color": "Black"}),
    (6, "ZARA-DRESS-BLUE-M", 49.99, True, True, True, {"Size": "M", "Color": "Floral Blue"}),
    (6, "ZARA-DRESS-PINK-M", 49.99, True, False, False, {"Size": "M", "Color": "Floral Pink"}),
    (7, "ADIDAS-RUN-BW-9", 89.99, True, True, True, {"Size": "9", "Color": "Black/White"}),
    (7, "ADIDAS-RUN-BW-10", 89.99, True, False, False, {"Size": "10", "Color": "Black/White"}),
    (8, "IKEA-SOFA-GRAY-FAB", 899.00, True, True, True, {"Color": "Gray", "Material": "Fabric"}),
    (8, "IKEA-SOFA-BEIGE-FAB", 899.00, True, False, False, {"Color": "Beige", "Material": "Fabric"}),
    (9, "CASPER-MATTRESS-Q-FOAM", 799.00, True, True, True, {}),
    (101, "IPHONE-14-BLACK-128GB", 799.00, True, False, True, {"Color": "Black", "Storage": "128GB"}),
    (101, "IPHONE-14-BLACK-256GB", 899.00, True, False, False, {"Color": "Black", "Storage": "256GB"}),
    (101, "IPHONE-14-WHITE-128GB", 799.00, True, False, False, {"Color": "White", "Storage": "128GB"}),
    (105, "PIXEL-8-BLACK-128GB", 699.00, True, False, True, {"Color": "Black", "Storage": "128GB"}),
    (105, "PIXEL-8-WHITE-256GB", 799.00, True, False, False, {"Color": "White", "Storage": "256GB"}),
    (148, "IPHONE-12-DISC-BLACK", 599.00, True, False, True, {}),
    # 모든 변형 구매 불가 (품절 패널티 대상)
    (149, "NOTE-20-OOS-BLACK", 899.00, False, False, True, {}),
    (150, "BUDGET-PHONE-BLACK", 99.00, True, False, True, {}),
    (151, "FOLD-ULTRA-BLACK", 2499.00, True, False, True, {}),
    (160, "RESELL-S23-BLACK", 749.00, True, False, True, {}),
]


def load_demo_catalog(session: Session, anchor: Optional[datetime] = None) -> dict:
    """
    데모 카탈로그를 적재합니다. 호출자가 커밋합니다.

    Returns:
        적재된 행 수 요약
    """
    anchor = anchor or DEMO_ANCHOR

    for category_id, name, parent_id, description, seller_id, is_active in CATEGORIES:
        session.add(Category(
            id=category_id,
            name=name,
            parent_id=parent_id,
            description=description,
            seller_id=seller_id,
            is_active=is_active,
            created_at=anchor,
            updated_at=anchor,
        ))
    session.flush()

    for product_id, seller_id, category_id, name, brand, sku, short_desc, tags, age_days in PRODUCTS:
        created_at = anchor - timedelta(days=age_days)
        session.add(Product(
            id=product_id,
            seller_id=seller_id,
            category_id=category_id,
            name=name,
            brand=brand,
            base_sku=sku,
            short_description=short_desc,
            tags=list(tags),
            created_at=created_at,
            updated_at=created_at,
        ))
    session.flush()

    option_by_key: dict[tuple[int, str], ProductOption] = {}
    value_by_key: dict[tuple[int, str, str], ProductOptionValue] = {}
    for product_id, options in OPTIONS.items():
        for position, (name, display_name, values) in enumerate(options, start=1):
            option = ProductOption(product_id=product_id, name=name, display_name=display_name, position=position)
            for value_position, (value, value_display, color_code) in enumerate(values, start=1):
                option_value = ProductOptionValue(
                    value=value,
                    display_name=value_display,
                    color_code=color_code,
                    position=value_position,
                )
                option.values.append(option_value)
                value_by_key[(product_id, name, value)] = option_value
            session.add(option)
            option_by_key[(product_id, name)] = option
    session.flush()

    variants: list[tuple[ProductVariant, dict]] = []
    for product_id, sku, price, allow_purchase, is_popular, is_default, selections in VARIANTS:
        variant = ProductVariant(
            product_id=product_id,
            sku=sku,
            price=price,
            allow_purchase=allow_purchase,
            is_popular=is_popular,
            is_default=is_default,
        )
        session.add(variant)
        variants.append((variant, selections))
    session.flush()

    links = 0
    for variant, selections in variants:
        for option_name, value in selections.items():
            option = option_by_key[(variant.product_id, option_name)]
            option_value = value_by_key[(variant.product_id, option_name, value)]
            session.add(VariantOptionValue(variant_id=variant.id, option_id=option.id, option_value_id=option_value.id))
            links += 1
    session.flush()

    summary = {
        "categories": len(CATEGORIES),
        "products": len(PRODUCTS),
        "options": len(option_by_key),
        "option_values": len(value_by_key),
        "variants": len(variants),
        "variant_option_values": links,
    }
    logger.info(f"[DemoCatalog] loaded {summary}")
    return summary

"""Reference calorie table used by the rule-based estimator."""

from dataclasses import dataclass

SOURCE_URLS: dict[str, str | None] = {
    "USDA": "https://fdc.nal.usda.gov/",
    "Fage label": "https://usa.fage/products/yogurt",
    "Vega label": "https://myvega.com/products/vega-protein-greens",
    "Whole Foods label": "https://www.wholefoodsmarket.com/",
    "Starbucks": "https://www.starbucks.com/menu/nutrition-info",
    "Typical label": "https://fdc.nal.usda.gov/",
    "Estimated": None,
}

BRAND_NAMES = frozenset(
    {
        "vega",
        "oikos",
        "siggi",
        "siggis",
        "chobani",
        "fage",
        "quest",
        "orgain",
        "optimum",
        "fairlife",
        "kirkland",
        "premier protein",
        "muscle milk",
        "rxbar",
        "kind",
        "larabar",
        "clif",
    }
)


@dataclass(frozen=True)
class FoodReference:
    """Calories for one unit of a known food plus its typical serving."""

    calories_per_unit: float
    unit: str
    default_quantity: float
    serving: str
    source: str = "USDA"
    generic: bool = False
    composite: bool = False


def _food(  # noqa: PLR0913
    calories: float,
    unit: str,
    serving: str,
    default_quantity: float = 1.0,
    source: str = "USDA",
    *,
    generic: bool = False,
    composite: bool = False,
) -> FoodReference:
    return FoodReference(
        calories_per_unit=calories,
        unit=unit,
        default_quantity=default_quantity,
        serving=serving,
        source=source,
        generic=generic or composite,
        composite=composite,
    )


FOOD_REFERENCE: dict[str, FoodReference] = {
    # Protein powders and supplements
    "vega protein": _food(140, "scoop", "1 scoop (36g)", source="Vega label"),
    "vega": _food(140, "scoop", "1 scoop (36g)", source="Vega label"),
    "protein powder": _food(120, "scoop", "1 scoop (~30g)", source="Typical label"),
    "whey protein": _food(120, "scoop", "1 scoop", source="Typical label"),
    "whey": _food(120, "scoop", "1 scoop", source="Typical label"),
    "collagen": _food(35, "scoop", "1 scoop", source="Typical label"),
    # Seeds
    "super seed blend": _food(60, "tbsp", "1 tbsp", source="Whole Foods label"),
    "chia seeds": _food(60, "tbsp", "1 tbsp"),
    "chia": _food(60, "tbsp", "1 tbsp"),
    "flax seeds": _food(55, "tbsp", "1 tbsp"),
    "flax": _food(55, "tbsp", "1 tbsp"),
    "hemp seeds": _food(55, "tbsp", "1 tbsp"),
    # Dairy
    "fage 2% yogurt": _food(150, "cup", "3/4 cup", 0.75, source="Fage label"),
    "fage yogurt": _food(150, "cup", "3/4 cup", 0.75, source="Fage label"),
    "fage": _food(150, "cup", "3/4 cup", 0.75, source="Fage label"),
    "greek yogurt": _food(130, "cup", "1 cup"),
    "yogurt": _food(150, "cup", "1 cup", generic=True),
    "almond milk": _food(40, "cup", "1 cup"),
    "oat milk": _food(120, "cup", "1 cup"),
    "soy milk": _food(80, "cup", "1 cup"),
    "milk": _food(120, "cup", "1 cup"),
    "cottage cheese": _food(220, "cup", "1/2 cup", 0.5),
    "cream cheese": _food(50, "tbsp", "1 tbsp"),
    "goat cheese": _food(75, "oz", "1 oz"),
    "feta": _food(75, "oz", "1 oz"),
    "parmesan": _food(22, "tbsp", "1 tbsp grated"),
    "cheddar": _food(115, "oz", "1 oz"),
    "mozzarella": _food(85, "oz", "1 oz"),
    "cheese": _food(110, "oz", "1 oz", generic=True),
    # Fruits
    "banana": _food(105, "banana", "1 medium (118g)"),
    "apple": _food(95, "apple", "1 medium"),
    "orange": _food(60, "orange", "1 medium"),
    "blueberries": _food(85, "cup", "1 cup"),
    "strawberries": _food(50, "cup", "1 cup"),
    "mixed berries": _food(70, "cup", "1 cup"),
    "berries": _food(70, "cup", "1 cup", generic=True),
    "grapes": _food(60, "cup", "1 cup"),
    "mango": _food(100, "cup", "1 cup"),
    "avocado": _food(240, "avocado", "1 whole"),
    # Vegetables
    "spinach": _food(7, "cup", "1 cup raw"),
    "kale": _food(33, "cup", "1 cup"),
    "broccoli": _food(55, "cup", "1 cup"),
    "carrots": _food(50, "cup", "1 cup"),
    "cauliflower rice": _food(25, "cup", "1 cup"),
    "riced cauliflower": _food(25, "cup", "1 cup"),
    "cauliflower": _food(25, "cup", "1 cup"),
    "kimchi": _food(40, "cup", "1/4 cup", 0.25),
    "mixed greens": _food(8, "cup", "1 cup"),
    "lettuce": _food(5, "cup", "1 cup"),
    "arugula": _food(5, "cup", "1 cup"),
    "cucumber": _food(16, "cup", "1 cup"),
    "tomato": _food(22, "tomato", "1 medium"),
    "bell pepper": _food(30, "pepper", "1 medium"),
    "onion": _food(45, "onion", "1 medium"),
    "vegetables": _food(50, "cup", "1 cup", generic=True),
    "veggies": _food(50, "cup", "1 cup", generic=True),
    "greens": _food(8, "cup", "1 cup", generic=True),
    # Proteins
    "scrambled egg": _food(90, "egg", "1 egg"),
    "hard boiled egg": _food(78, "egg", "1 large"),
    "boiled egg": _food(78, "egg", "1 large"),
    "fried egg": _food(90, "egg", "1 large"),
    "egg white": _food(17, "egg", "1 large white"),
    "egg": _food(70, "egg", "1 large"),
    "chicken breast": _food(280, "breast", "1 breast (~6oz)"),
    "chicken thigh": _food(180, "thigh", "1 thigh (~4oz)"),
    "chicken": _food(45, "oz", "4 oz", 4),
    "salmon fillet": _food(280, "fillet", "1 fillet (~6oz)"),
    "salmon": _food(50, "oz", "4 oz", 4),
    "tuna": _food(30, "oz", "3 oz", 3),
    "steak": _food(55, "oz", "6 oz", 6),
    "ground beef": _food(70, "oz", "4 oz cooked", 4),
    "beef": _food(65, "oz", "4 oz", 4),
    "turkey": _food(40, "oz", "3 oz", 3),
    "bacon": _food(45, "slice", "1 slice"),
    "tofu": _food(20, "oz", "3 oz", 3),
    "shrimp": _food(25, "oz", "3 oz", 3),
    # Grains
    "oatmeal": _food(150, "cup", "1 cup cooked"),
    "oats": _food(150, "cup", "1 cup cooked"),
    "brown rice": _food(220, "cup", "1 cup cooked"),
    "rice": _food(200, "cup", "1 cup cooked"),
    "quinoa": _food(220, "cup", "1 cup cooked"),
    "pasta": _food(200, "cup", "1 cup cooked"),
    "bread": _food(80, "slice", "1 slice"),
    "toast": _food(80, "slice", "1 slice"),
    "bagel": _food(280, "bagel", "1 medium"),
    "tortilla": _food(90, "tortilla", "1 medium"),
    "pancake": _food(90, "pancake", "1 medium"),
    "waffle": _food(220, "waffle", "1 large"),
    "cereal": _food(150, "cup", "1 cup", generic=True),
    "granola": _food(560, "cup", "1/4 cup", 0.25),
    "sweet potato": _food(100, "potato", "1 medium"),
    "potato": _food(160, "potato", "1 medium"),
    # Nuts and nut butters
    "peanut butter": _food(95, "tbsp", "1 tbsp"),
    "almond butter": _food(100, "tbsp", "1 tbsp"),
    "almonds": _food(165, "oz", "1 oz (~23)"),
    "peanuts": _food(170, "oz", "1 oz"),
    "walnuts": _food(185, "oz", "1 oz"),
    "cashews": _food(160, "oz", "1 oz"),
    "pecans": _food(195, "oz", "1 oz"),
    "pistachios": _food(160, "oz", "1 oz"),
    "mixed nuts": _food(170, "oz", "1 oz"),
    # Legumes
    "chickpeas": _food(260, "cup", "1/4 cup", 0.25),
    "black beans": _food(220, "cup", "1/2 cup", 0.5),
    "kidney beans": _food(220, "cup", "1/2 cup", 0.5),
    "lentils": _food(230, "cup", "1/2 cup cooked", 0.5),
    "edamame": _food(190, "cup", "1/2 cup shelled", 0.5),
    # Condiments and dressings
    "honey": _food(60, "tbsp", "1 tbsp"),
    "maple syrup": _food(50, "tbsp", "1 tbsp"),
    "butter": _food(100, "tbsp", "1 tbsp"),
    "olive oil": _food(120, "tbsp", "1 tbsp"),
    "coconut oil": _food(120, "tbsp", "1 tbsp"),
    "oil": _food(120, "tbsp", "1 tbsp", generic=True),
    "cocoa powder": _food(12, "tbsp", "1 tbsp"),
    "ranch dressing": _food(75, "tbsp", "1 tbsp"),
    "ranch": _food(75, "tbsp", "1 tbsp"),
    "italian dressing": _food(35, "tbsp", "1 tbsp"),
    "caesar dressing": _food(80, "tbsp", "1 tbsp"),
    "balsamic vinaigrette": _food(45, "tbsp", "1 tbsp"),
    "vinaigrette": _food(45, "tbsp", "1 tbsp"),
    "dressing": _food(70, "tbsp", "2 tbsp", 2, generic=True),
    "mayonnaise": _food(90, "tbsp", "1 tbsp"),
    "mayo": _food(90, "tbsp", "1 tbsp"),
    "hummus": _food(25, "tbsp", "2 tbsp", 2),
    "salsa": _food(5, "tbsp", "2 tbsp", 2),
    "guacamole": _food(25, "tbsp", "2 tbsp", 2),
    "sour cream": _food(30, "tbsp", "1 tbsp"),
    # Beverages
    "coffee": _food(5, "cup", "1 cup black"),
    "latte": _food(190, "latte", "12 oz", source="Starbucks"),
    "orange juice": _food(110, "cup", "8 oz"),
    "juice": _food(120, "cup", "8 oz", generic=True),
    # Snacks
    "protein bar": _food(220, "bar", "1 bar", source="Typical label"),
    "granola bar": _food(140, "bar", "1 bar"),
    "chips": _food(150, "oz", "1 oz"),
    "dark chocolate": _food(170, "oz", "1 oz"),
    "chocolate": _food(150, "oz", "1 oz", generic=True),
    "ice cream": _food(275, "cup", "1/2 cup", 0.5),
    "cookie": _food(100, "cookie", "1 medium"),
    # Composite dishes, only counted when no specific ingredients matched
    "smoothie": _food(300, "smoothie", "16 oz", source="Estimated", composite=True),
    "shake": _food(300, "shake", "16 oz", source="Estimated", composite=True),
    "sandwich": _food(
        400, "sandwich", "1 sandwich", source="Estimated", composite=True
    ),
    "burger": _food(550, "burger", "1 with bun", source="Estimated", composite=True),
    "burrito": _food(500, "burrito", "1 burrito", source="Estimated", composite=True),
    "taco": _food(200, "taco", "1 taco", composite=True),
    "pizza": _food(280, "slice", "1 slice", composite=True),
    "salad": _food(150, "salad", "1 side salad", source="Estimated", composite=True),
    "soup": _food(150, "cup", "1 cup", composite=True),
    "bowl": _food(450, "bowl", "1 bowl", source="Estimated", composite=True),
    "wrap": _food(350, "wrap", "1 wrap", source="Estimated", composite=True),
    "plate": _food(500, "plate", "1 plate", source="Estimated", composite=True),
    "stir fry": _food(400, "serving", "1 serving", source="Estimated", composite=True),
    "parfait": _food(300, "parfait", "1 parfait", source="Estimated", composite=True),
    "omelette": _food(
        250, "omelette", "1 omelette", source="Estimated", composite=True
    ),
    "omelet": _food(250, "omelet", "1 omelet", source="Estimated", composite=True),
}

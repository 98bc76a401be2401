"""Demo content for a fresh database.

`seed_recipes(session)` creates a demo chef and a handful of recipes when the
recipes table is empty, then reconciles the chef's counters. Running it
again is a no-op.
"""

from core.logger import get_logger
from core.security import hash_password
from database import models
from database.database import WriteSessionLocal
from services.stats_service import recompute_stats

logger = get_logger("data.seed_recipes")

DEMO_CHEF = {
    "name": "Demo Chef",
    "username": "demochef",
    "email": "chef@recipes.local",
    "tagline": "Cooking simple food well",
    "cooking_style": "Home cooking",
    "is_verified": True,
}

DEMO_RECIPES = [
    {
        "title": "Classic Shakshuka",
        "description": "Eggs gently poached in a spiced tomato and pepper sauce.",
        "ingredients": [
            {"name": "Eggs", "amount": "4"},
            {"name": "Crushed tomatoes", "amount": "1 can"},
            {"name": "Red pepper", "amount": "1"},
            {"name": "Cumin", "amount": "1 tsp"},
        ],
        "instructions": [
            {"text": "Soften the pepper in olive oil."},
            {"text": "Add tomatoes and cumin, simmer 10 minutes."},
            {"text": "Make wells, crack in the eggs and cover until set."},
        ],
        "prep_time": 10, "cook_time": 20, "servings": 2,
        "difficulty": "Easy", "category": "Breakfast",
        "nutrition": {"calories": 320, "carbs": 18, "protein": 17, "fat": 19},
    },
    {
        "title": "Lentil Soup",
        "description": "Hearty red lentil soup with lemon and cumin.",
        "ingredients": [
            {"name": "Red lentils", "amount": "1 cup"},
            {"name": "Onion", "amount": "1"},
            {"name": "Vegetable stock", "amount": "1 l"},
            {"name": "Lemon", "amount": "1"},
        ],
        "instructions": [
            {"text": "Sweat the onion."},
            {"text": "Add lentils and stock, simmer 25 minutes."},
            {"text": "Blend and finish with lemon juice."},
        ],
        "prep_time": 10, "cook_time": 30, "servings": 4,
        "difficulty": "Easy", "category": "Soups",
        "nutrition": {"calories": 240, "carbs": 38, "protein": 15, "fat": 3},
    },
    {
        "title": "Chicken Tikka Masala",
        "description": "Charred marinated chicken in a creamy tomato sauce.",
        "ingredients": [
            {"name": "Chicken thighs", "amount": "500 g"},
            {"name": "Yogurt", "amount": "150 g"},
            {"name": "Garam masala", "amount": "2 tsp"},
            {"name": "Cream", "amount": "100 ml"},
        ],
        "instructions": [
            {"text": "Marinate the chicken in yogurt and spices for an hour."},
            {"text": "Grill until charred."},
            {"text": "Simmer in the sauce and finish with cream."},
        ],
        "prep_time": 70, "cook_time": 30, "servings": 4,
        "difficulty": "Medium", "category": "Non-Vegetarian",
        "nutrition": {"calories": 480, "carbs": 14, "protein": 38, "fat": 29},
    },
    {
        "title": "Chocolate Lava Cake",
        "description": "Individual chocolate cakes with a molten centre.",
        "ingredients": [
            {"name": "Dark chocolate", "amount": "100 g"},
            {"name": "Butter", "amount": "100 g"},
            {"name": "Eggs", "amount": "2"},
            {"name": "Sugar", "amount": "50 g"},
        ],
        "instructions": [
            {"text": "Melt chocolate and butter together."},
            {"text": "Whisk in eggs and sugar, fill ramekins."},
            {"text": "Bake 12 minutes at 200C."},
        ],
        "prep_time": 15, "cook_time": 12, "servings": 2,
        "difficulty": "Hard", "category": "Desserts",
        "nutrition": {"calories": 610, "carbs": 45, "protein": 9, "fat": 44},
    },
]


def seed_recipes(session=None) -> int:
    """Seed the demo chef and recipes if no recipe exists yet.

    Args:
        session: Optional SQLAlchemy session. If None, creates a new one.

    Returns:
        Number of recipes added.
    """
    close_session = False
    if session is None:
        session = WriteSessionLocal()
        close_session = True
    try:
        if session.query(models.Recipe.id).first() is not None:
            logger.debug("Recipes already present; skipping seed")
            return 0

        chef = session.query(models.User).filter(models.User.email == DEMO_CHEF["email"]).first()
        if chef is None:
            chef = models.User(password_hash=hash_password("demochef"), **DEMO_CHEF)
            session.add(chef)
            session.flush()

        for item in DEMO_RECIPES:
            session.add(models.Recipe(author_id=chef.id, **item))
        session.commit()

        recompute_stats(session, chef.id)
        logger.info("Seeded %s demo recipes for user %s", len(DEMO_RECIPES), chef.id)
        return len(DEMO_RECIPES)
    finally:
        if close_session:
            session.close()


if __name__ == "__main__":
    print(f"Added {seed_recipes()} recipes")

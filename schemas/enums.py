"""Enumerations shared by request/response schemas and services."""

from enum import Enum


class Difficulty(str, Enum):
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"


class Category(str, Enum):
    BREAKFAST = "Breakfast"
    LUNCH = "Lunch"
    DINNER = "Dinner"
    DESSERTS = "Desserts"
    VEGETARIAN = "Vegetarian"
    VEGAN = "Vegan"
    GLUTEN_FREE = "Gluten-Free"
    KETOS = "Ketos"
    NON_VEGETARIAN = "Non-Vegetarian"
    SNACKS = "Snacks"
    SALADS = "Salads"
    SOUPS = "Soups"
    JUICES = "Juices"


class NotificationType(str, Enum):
    WELCOME = "welcome"
    LOGIN = "login"
    FOLLOW = "follow"
    RECIPE_ADDED = "recipe_added"
    RECIPE_LIKED = "recipe_liked"
    RECIPE_SAVED = "recipe_saved"
    REVIEW_ADDED = "review_added"
    COMMENT_ADDED = "comment_added"
    NEW_FOLLOWER = "new_follower"
    RECIPE_FEATURED = "recipe_featured"
    ACHIEVEMENT = "achievement"


class SharePlatform(str, Enum):
    TWITTER = "twitter"
    FACEBOOK = "facebook"
    WHATSAPP = "whatsapp"
    COPY = "copy"


class UserLevel(str, Enum):
    NEW_COOK = "New Cook"
    BEGINNER_CHEF = "Beginner Chef"
    INTERMEDIATE_CHEF = "Intermediate Chef"
    ADVANCED_CHEF = "Advanced Chef"
    EXPERT_CHEF = "Expert Chef"
    MASTER_CHEF = "Master Chef"

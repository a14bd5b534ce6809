"""
Built-in categories.

Four levels from very easy to hard. Each call returns fresh Category
objects with fresh Term instances, so games never share term flags.
"""

from __future__ import annotations

from ..engine_core.settings import Category
from ..engine_core.term import Term


VERY_EASY = [
    "Cat", "Dog", "Mouse", "Fish", "Bird", "Rabbit", "Cow", "Horse", "Sheep", "Pig",
    "Duck", "Chicken", "Bear", "Lion", "Tiger", "Elephant", "Giraffe", "Monkey", "Penguin", "Frog",
    "Butterfly", "Bee", "Spider", "Snake", "Crocodile", "Zebra", "Donkey", "Hamster", "Parrot", "Fox",
    "Apple", "Banana", "Grape", "Strawberry", "Watermelon", "Bread", "Cheese", "Pizza", "Ice cream", "Cake",
    "Milk", "Water", "Juice", "Egg", "Tomato", "Carrot", "Chocolate", "Cookie", "Soup", "Honey",
    "Car", "Bus", "Train", "Airplane", "Ship", "Bicycle", "Ball", "Balloon", "Doll", "Backpack",
    "Shoe", "Hat", "Jacket", "Glasses", "Watch", "Key", "Lamp", "Table", "Chair", "Bed",
    "Sun", "Moon", "Star", "Rain", "Snow", "Rainbow", "Cloud", "Tree", "Flower", "Mountain",
]

EASY = [
    "Firefighter", "Police", "Doctor", "Baker", "Teacher", "Gardener", "Chef", "Pilot", "Mailman", "Astronaut",
    "Clown", "Magician", "Pirate", "Knight", "King", "Princess", "Witch", "Fairy", "Vampire", "Detective",
    "Harry Potter", "Mickey Mouse", "Spongebob", "Spiderman", "Batman", "Superman", "Elsa", "Pikachu", "Super Mario", "Darth Vader",
    "Simba", "Nemo", "Shrek", "Barbie", "James Bond", "Tarzan", "Pinocchio", "Snow White", "Cinderella", "Garfield",
    "Soccer", "Tennis", "Basketball", "Swimming", "Dancing", "Painting", "Cooking", "Fishing", "Skiing", "Chess",
    "Cinema", "Zoo", "School", "Castle", "Island", "Farm", "Supermarket", "Hospital", "Guitar", "Piano",
    "Robot", "Rocket", "UFO", "Ghost", "Mummy", "Monster", "Alien", "Dragon", "Unicorn", "Mermaid",
]

MEDIUM = [
    "Germany", "Italy", "Spain", "France", "China", "Japan", "Brazil", "Australia", "Egypt", "Canada",
    "Berlin", "Paris", "London", "Rome", "New York", "Tokyo", "Hawaii", "Las Vegas", "Hollywood", "Venice",
    "Eiffel Tower", "Statue of Liberty", "Colosseum", "Great Wall of China", "Pyramids", "Big Ben",
    "Leaning Tower of Pisa", "Taj Mahal", "Mount Everest", "Niagara Falls", "Grand Canyon", "North Pole",
    "Albert Einstein", "Mozart", "Beethoven", "Michael Jackson", "Elvis Presley", "Madonna", "Cleopatra", "Napoleon",
    "Coca Cola", "McDonalds", "Samsung", "Google", "Netflix", "YouTube", "Lego", "Disney", "Ferrari", "Nintendo",
]

HARD = [
    "Atom", "Molecule", "DNA", "Evolution", "Gravity", "Theory of Relativity", "Photosynthesis", "Oxygen",
    "Microscope", "Telescope", "Satellite", "Algorithm", "Artificial Intelligence", "Blockchain", "Black Hole", "Supernova",
    "Democracy", "Dictatorship", "Monarchy", "Revolution", "Inflation", "Globalization", "Middle Ages", "Renaissance",
    "Constitution", "Parliament", "Ambassador", "Diplomat", "Veto", "Shakespeare", "Da Vinci", "Van Gogh",
    "Mona Lisa", "Philosophy", "Psychology", "Archaeology", "Opera", "Ballet", "Symphony", "Poetry",
    "Kaleidoscope", "Labyrinth", "Oasis", "Mirage", "Echo", "Silhouette", "Horizon", "Stalactite", "Obelisk", "Pagoda",
]

# category_id -> (display name, level, texts)
DEFAULT_CATEGORY_DATA = {
    "very_easy": ("Very easy", "very_easy", VERY_EASY),
    "easy": ("Easy", "easy", EASY),
    "medium": ("Medium", "medium", MEDIUM),
    "hard": ("Hard category", "hard", HARD),
}


def make_category(category_id: str, name: str, texts: list[str], level: str = "custom") -> Category:
    return Category(
        category_id=category_id,
        name=name,
        level=level,
        terms=[Term(text=text) for text in texts],
    )


def default_categories() -> list[Category]:
    """All built-in categories, freshly instantiated."""
    return [
        make_category(category_id, name, texts, level)
        for category_id, (name, level, texts) in DEFAULT_CATEGORY_DATA.items()
    ]

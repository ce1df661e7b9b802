"""
Suggestion Mapper
=================

Fixed food suggestions per mood.
"""

from typing import Dict, List, Tuple, Union

from moodcam.models.mood import MoodCategory


SUGGESTIONS: Dict[MoodCategory, Tuple[str, ...]] = {
    MoodCategory.VERY_HAPPY: ("Celebrate with Pizza", "Sushi", "Chocolate cake"),
    MoodCategory.HAPPY: ("Ice-cream", "Pasta", "Fresh fruit"),
    MoodCategory.NEUTRAL: ("Sandwich", "Salad", "Tea"),
    MoodCategory.SAD: ("Warm soup", "Comfort food - Mac & Cheese", "Hot chocolate"),
    MoodCategory.VERY_SAD: ("Chocolate", "Ice-cream", "Call a friend"),
}

DEFAULT_SUGGESTIONS: Tuple[str, ...] = ("Water", "Fruit")


def suggestions_for(mood: Union[MoodCategory, str]) -> List[str]:
    """
    Suggestions for a mood, in display order.

    Accepts enum members or their display labels. Unknown values get
    DEFAULT_SUGGESTIONS. Returns a new list on every call.
    """
    try:
        key = MoodCategory(mood)
    except (ValueError, TypeError):
        return list(DEFAULT_SUGGESTIONS)
    return list(SUGGESTIONS.get(key, DEFAULT_SUGGESTIONS))

"""
Fixed restaurant list served when vector search is unavailable or empty.
"""

from typing import List

from .models import Coordinates, Restaurant

FALLBACK_RESTAURANTS = (
    Restaurant(
        name="L'Artusi",
        neighborhood="West Village",
        cuisine="Italian",
        price="$$$",
        rating=4.7,
        vibe=["romantic", "lively", "upscale casual", "date night"],
        signature_dish="Roasted Mushroom Garganelli",
        why_for_you="A quintessential West Village pasta destination that perfectly balances energy and elegance.",
        pro_tip="Walk-in seats at the chef's counter are often available if you arrive right at 5pm.",
        wait_time="Reservation required",
        best_time="5:00 PM or 10:00 PM",
        coordinates=Coordinates(lat=40.7338, lng=-74.0051),
    ),
    Restaurant(
        name="Win Son",
        neighborhood="East Williamsburg",
        cuisine="Taiwanese-American",
        price="$$",
        rating=4.5,
        vibe=["cool", "loud", "trendy", "casual"],
        signature_dish="Fly's Head with Pork & Chives",
        why_for_you="Bold flavors and a high-energy atmosphere that captures the modern Brooklyn dining scene.",
        pro_tip="Put your name down and grab a donut at their bakery across the street while you wait.",
        wait_time="45-90 min",
        best_time="Late night (after 9pm)",
        coordinates=Coordinates(lat=40.7072, lng=-73.9406),
    ),
    Restaurant(
        name="Double Chicken Please",
        neighborhood="Lower East Side",
        cuisine="Cocktails/Sandwiches",
        price="$$",
        rating=4.8,
        vibe=["industrial", "vibrant", "innovative", "viral"],
        signature_dish="Hot Honey Chicken Sandwich",
        why_for_you="Voted one of the world's best bars, offering incredible food in a design-forward space.",
        pro_tip="The front room (Free Coop) is walk-in only and serves the famous sandwiches.",
        wait_time="60+ min",
        best_time="Weekdays 5pm",
        coordinates=Coordinates(lat=40.7186, lng=-73.9916),
    ),
    Restaurant(
        name="Rubirosa",
        neighborhood="Nolita",
        cuisine="Italian/Pizza",
        price="$$",
        rating=4.6,
        vibe=["cozy", "dimly lit", "classic", "family friendly"],
        signature_dish="Tie-Dye Pizza",
        why_for_you="A cozy, classic NYC red-sauce joint famous for its thin crust pizza.",
        pro_tip="The vodka sauce pizza is non-negotiable.",
        wait_time="30-60 min",
        best_time="Lunch or late night",
        coordinates=Coordinates(lat=40.7227, lng=-73.9960),
    ),
    Restaurant(
        name="Kiki's",
        neighborhood="Dimes Square",
        cuisine="Greek",
        price="$$",
        rating=4.4,
        vibe=["rustic", "trendy", "lively", "low-key"],
        signature_dish="Grilled Octopus",
        why_for_you="Effortlessly cool vibe with great prices and authentic food. A local favorite.",
        pro_tip="There is no sign outside. Look for the Chinese sign from the previous tenant.",
        wait_time="30-45 min",
        best_time="Pre-7pm",
        coordinates=Coordinates(lat=40.7145, lng=-73.9915),
    ),
)


def fallback_restaurants() -> List[Restaurant]:
    """A fresh list each call; the records themselves are frozen."""
    return list(FALLBACK_RESTAURANTS)

"""CityCarbon: city search and distance engine for household carbon footprint estimates."""

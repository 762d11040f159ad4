"""
CityReport - Location resolution and staged submission for citizen reports and events.
"""

__version__ = "0.1.0"

"""UrbanSprout plant-care community and store"""

__version__ = "1.0.0"

"""What's For Dinner - recipe discovery service backed by Spoonacular."""

__version__ = "1.0.0"

# This project was developed with assistance from AI tools.
__version__ = "0.1.0"

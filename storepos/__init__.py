"""Store POS - inventory, checkout and sales reporting backend"""

__version__ = "1.0.0"

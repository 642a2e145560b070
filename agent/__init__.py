"""Conversational shopping agent.

Turns free-text shopping messages into calls against the ACP market:
search-and-add picks the most profitable merchant and the cheapest
matching products; checkout pays for the conversation's cart.
"""

__version__ = "0.1.0"

"""KisanAI storage chatbot: consent-gated chat commands over warehouse inventory."""

__version__ = "0.1.0"

"""
agendafinder - date resolution and slot availability for a WhatsApp scheduling assistant.
"""

__version__ = "0.1.0"

"""
Messaging Router

Routes outbound WhatsApp messages for each tenant through one of three
delivery providers (Desktop Agent queue, Waha cloud session, Maytapi legacy
API), with a one-shot fallback to Maytapi and paced broadcast sends.
"""

__version__ = "1.0.0"

"""
Messaging Router CLI
"""

"""
Agent Gateway

HTTP surface for the Desktop Agent queue and tenant delivery.
"""

"""routes package"""

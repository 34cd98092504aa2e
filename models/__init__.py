"""models package"""

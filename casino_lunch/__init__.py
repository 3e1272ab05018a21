"""
Casino Lunch - cafeteria lunch reservation backend.
"""

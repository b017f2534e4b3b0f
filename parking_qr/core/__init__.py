"""
Configuration, logging, errors and request dependencies
"""

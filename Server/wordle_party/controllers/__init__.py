"""
Controllers Package

HTTP blueprints exposing the record store.
"""

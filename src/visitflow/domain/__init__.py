"""
Domain layer: visit lifecycle rules with no framework dependencies.
"""

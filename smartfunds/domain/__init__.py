"""Domain layer: mission model, transition table and error taxonomy.

The domain layer imports nothing from the other smartfunds layers.
"""

"""
Padaria Signals.

Integration points for other apps (stock, notifications...).
All signals are sent only after the writing transaction commits.

Signals:
    recipe_created: Recipe and its ingredient lines committed
    production_completed: ProductionOrder finished
"""

from django.dispatch import Signal

# Recipe committed with all its ingredient lines
# Args: recipe, lines_created, user
recipe_created = Signal()

# Production completed
# Sent by ProductionOrder.complete()
# Args: order, actual_quantity, user
production_completed = Signal()

__all__ = ["recipe_created", "production_completed"]

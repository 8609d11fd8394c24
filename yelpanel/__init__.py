"""Control-panel logic for a positive airway pressure device: numeric helpers, settings store, display protocol and motor-controller registers."""

__version__ = "0.1.0"
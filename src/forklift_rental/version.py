"""Version metadata for ForkliftRental."""

__app_name__ = "ForkliftRental"
__version__ = "0.3.0"
__company__ = "Forklift Rental Ops"

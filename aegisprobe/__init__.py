__app_name__ = "AegisProbe"
__version__ = "0.3.0"

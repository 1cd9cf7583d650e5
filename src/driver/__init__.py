from .models import DriverContext, HardwareFamily

__all__ = ["DriverContext", "HardwareFamily"]

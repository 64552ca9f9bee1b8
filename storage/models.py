"""
Record types for the component log stream.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class Component(str, Enum):
    """
    Closed set of device components that may report log values.
    
    Declaration order is the order components appear in summaries.
    """
    
    BATTERY = "battery"
    MOTOR = "motor"
    GPS = "gps"
    
    @classmethod
    def names(cls) -> list[str]:
        """Wire names of all components, in declaration order."""
        return [component.value for component in cls]


class LogEntry(BaseModel):
    """
    A validated log entry. Immutable once stored.
    
    Attributes:
        timestamp: Positive integer timestamp
        component: The reporting component
        value: Finite numeric reading
    """
    
    model_config = ConfigDict(frozen=True)
    
    timestamp: int
    component: Component
    value: float

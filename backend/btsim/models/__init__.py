"""
BTSim Data Models Package

Pydantic models for data validation and serialization.
"""

from .context import *
from .simulation import *
from .detection import *
from .progression import *

"""
Pydantic schemas for request/response models
"""

from .common import *
from .user import *
from .video import *

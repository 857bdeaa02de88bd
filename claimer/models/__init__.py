"""
Types here are instantiated as subclasses of pydantic's `BaseModel`.
This means we get runtime deserialization and validation for free just by using type declarations
and a couple of pydantic helpers.

Use these in your code as python objects, then serialize to json with `.model_dump()`
"""

from claimer.models.types import *
from claimer.models.Participant import *
from claimer.models.Claim import *
from claimer.models.Config import *
from claimer.models.Report import *
from claimer.models.Writer import *
from claimer.models.DB import *

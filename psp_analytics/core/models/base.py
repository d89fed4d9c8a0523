"""
Base class for derived analysis output.
"""

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class AnalysisModel(BaseModel):
    """
    Immutable analysis output serialised with camelCase keys.

    ``model_dump(by_alias=True)`` produces the key names the presentation
    layer consumes (``uniqueApproved``, ``weightedSuccessRate``...).
    """

    class Config:
        frozen = True
        alias_generator = to_camel
        populate_by_name = True

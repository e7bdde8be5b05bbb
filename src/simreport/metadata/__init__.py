"""Experiment metadata: attribute codes, dictionary lookup and value sets."""

from simreport.metadata.attributes import (
    AttributeDescriptor,
    AttributeResolver,
    MetadataCatalog,
)
from simreport.metadata.avu import AttributeValueSet

__all__ = [
    "AttributeDescriptor",
    "AttributeResolver",
    "AttributeValueSet",
    "MetadataCatalog",
]

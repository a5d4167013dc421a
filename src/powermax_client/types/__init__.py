"""JSON data-transfer types exchanged with the array."""
from .base import HeaderProvider, Payload, RawStream, json_field
from .replication import (
    CreateRDFPair,
    CreateSGSRDF,
    LocalDeviceAutoCriteria,
    LocalDeviceListCriteria,
    ModifySGRDFGroup,
    RDFDevicePair,
    RDFDevicePairList,
    RDFGroup,
    RDFStorageGroup,
    Resume,
    SGRDFGList,
    SGRDFInfo,
    StorageGroupRDFG,
    Suspend,
)

__all__ = [
    "HeaderProvider",
    "Payload",
    "RawStream",
    "json_field",
    "CreateRDFPair",
    "CreateSGSRDF",
    "LocalDeviceAutoCriteria",
    "LocalDeviceListCriteria",
    "ModifySGRDFGroup",
    "RDFDevicePair",
    "RDFDevicePairList",
    "RDFGroup",
    "RDFStorageGroup",
    "Resume",
    "SGRDFGList",
    "SGRDFInfo",
    "StorageGroupRDFG",
    "Suspend",
]

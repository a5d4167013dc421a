"""Replication (SRDF) payloads exchanged with the Unisphere REST API."""

from __future__ import annotations

from dataclasses import dataclass

from .base import Payload, json_field


@dataclass
class RDFGroup(Payload):
    """Information about an RDF group."""

    rdfg_number: int = json_field("rdfgNumber", default=0)
    label: str = json_field("label", default="")
    remote_rdfg_number: int = json_field("remoteRdfgNumber", default=0)
    remote_symmetrix: str = json_field("remoteSymmetrix", default="")
    num_devices: int = json_field("numDevices", default=0)
    total_device_capacity: float = json_field("totalDeviceCapacity", default=0.0)
    local_ports: list[str] = json_field("localPorts", default_factory=list)
    remote_ports: list[str] = json_field("remotePorts", default_factory=list)
    modes: list[str] = json_field("modes", default_factory=list)
    type: str = json_field("type", default="")
    metro: bool = json_field("metro", default=False)
    async_: bool = json_field("async", default=False)
    witness: bool = json_field("witness", default=False)
    witness_name: str = json_field("witnessName", default="")
    witness_protected_physical: bool = json_field("witnessProtectedPhysical", default=False)
    witness_protected_virtual: bool = json_field("witnessProtectedVirtual", default=False)
    witness_configured: bool = json_field("witnessConfigured", default=False)
    witness_effective: bool = json_field("witnessEffective", default=False)
    bias_configured: bool = json_field("biasConfigured", default=False)
    bias_effective: bool = json_field("biasEffective", default=False)
    witness_degraded: bool = json_field("witnessDegraded", default=False)
    local_online_ports: list[str] = json_field("localOnlinePorts", default_factory=list)
    remote_online_ports: list[str] = json_field("remoteOnlinePorts", default_factory=list)
    device_polarity: str = json_field("device_polarity", default="")


@dataclass
class Suspend(Payload):
    """Suspend action options."""

    force: bool = json_field("force", default=False)
    sym_force: bool = json_field("symForce", default=False)
    star: bool = json_field("star", default=False)
    hop2: bool = json_field("hop2", default=False)
    bypass: bool = json_field("bypass", default=False)
    immediate: bool = json_field("immediate", default=False)
    cons_exempt: bool = json_field("consExempt", default=False)
    metro_bias: bool = json_field("metroBias", default=False)


@dataclass
class Resume(Payload):
    """Resume action options."""

    force: bool = json_field("force", default=False)
    sym_force: bool = json_field("symForce", default=False)
    star: bool = json_field("star", default=False)
    hop2: bool = json_field("hop2", default=False)
    bypass: bool = json_field("bypass", default=False)
    remote: bool = json_field("remote", default=False)
    recover_point: bool = json_field("recoverPoint", default=False)


@dataclass
class ModifySGRDFGroup(Payload):
    """Parameters for RDF storage group updates."""

    action: str = json_field("action", default="")
    suspend: Suspend | None = json_field("suspend", default=None, omitempty=True)
    resume: Resume | None = json_field("resume", default=None, omitempty=True)
    execution_option: str = json_field("executionOption", default="")


@dataclass
class CreateSGSRDF(Payload):
    """Parameters to create storage group replication (``storageGroupSrdfCreate``)."""

    remote_symm_id: str = json_field("remoteSymmId", default="")
    replication_mode: str = json_field("replicationMode", default="")
    rdfg_number: int = json_field("rdfgNumber", default=0)
    force_new_rdf_group: str = json_field("forceNewRdfGroup", default="")
    establish: bool = json_field("establish", default=False)
    metro_bias: bool = json_field("metroBias", default=False)
    remote_storage_group_name: str = json_field("remoteStorageGroupName", default="")
    thin_pool: str = json_field("thinPool", default="")
    fast_policy: str = json_field("fastPolicy", default="")
    remote_slo: str = json_field("remoteSLO", default="")
    no_compression: bool = json_field("noCompression", default=False)
    execution_option: str = json_field("executionOption", default="")


@dataclass
class SGRDFInfo(Payload):
    """SRDF information of a storage group (``storageGroupRDFg``)."""

    symmetrix_id: str = json_field("symmetrixId", default="")
    storage_group_name: str = json_field("storageGroupName", default="")
    rdf_group_number: int = json_field("rdfGroupNumber", default=0)
    volume_rdf_types: list[str] = json_field("volumeRdfTypes", default_factory=list)
    states: list[str] = json_field("states", default_factory=list)
    modes: list[str] = json_field("modes", default_factory=list)
    hop2_rdfgs: list[int] = json_field("hop2Rdfgs", default_factory=list)
    hop2_states: list[str] = json_field("hop2States", default_factory=list)
    hop2_modes: list[str] = json_field("hop2Modes", default_factory=list)
    larger_rdf_sides: list[str] = json_field("largerRdfSides", default_factory=list)
    total_tracks: int = json_field("totalTracks", default=0)
    local_r1_invalid_tracks_hop1: int = json_field("localR1InvalidTracksHop1", default=0)
    local_r2_invalid_tracks_hop1: int = json_field("localR2InvalidTracksHop1", default=0)
    remote_r1_invalid_tracks_hop1: int = json_field("remoteR1InvalidTracksHop1", default=0)
    remote_r2_invalid_tracks_hop1: int = json_field("remoteR2InvalidTracksHop1", default=0)
    src_r1_invalid_tracks_hop2: int = json_field("srcR1InvalidTracksHop2", default=0)
    src_r2_invalid_tracks_hop2: int = json_field("srcR2InvalidTracksHop2", default=0)
    tgt_r1_invalid_tracks_hop2: int = json_field("tgtR1InvalidTracksHop2", default=0)
    tgt_r2_invalid_tracks_hop2: int = json_field("tgtR2InvalidTracksHop2", default=0)


@dataclass
class SGRDFGList(Payload):
    """RDF group numbers protecting a storage group."""

    rdfg_list: list[str] = json_field("rdfgs", default_factory=list)


@dataclass
class RDFStorageGroup(Payload):
    """A protected storage group."""

    name: str = json_field("name", default="")
    symmetrix_id: str = json_field("symmetrixId", default="")
    parent_name: str = json_field("parentName", default="")
    child_names: list[str] = json_field("childNames", default_factory=list)
    num_devices_non_gk: int = json_field("numDevicesNonGk", default=0)
    capacity_gb: float = json_field("capacityGB", default=0.0)
    num_snapvx_snapshots: int = json_field("numSnapVXSnapshots", default=0)
    snapvx_snapshots: list[str] = json_field("snapVXSnapshots", default_factory=list)
    rdf: bool = json_field("rdf", default=False)
    is_link_target: bool = json_field("isLinkTarget", default=False)


@dataclass
class LocalDeviceAutoCriteria(Payload):
    """Criteria for auto-selecting local devices when pairing."""

    pair_count: int = json_field("pairCount", default=0)
    emulation: str = json_field("emulation", default="")
    capacity: int = json_field("capacity", default=0)
    capacity_unit: str = json_field("capacityUnit", default="")
    local_thin_pool_name: str = json_field("localThinPoolName", default="")
    remote_thin_pool_name: str = json_field("remoteThinPoolName", default="")


@dataclass
class LocalDeviceListCriteria(Payload):
    """Explicit local device list used when pairing."""

    local_device_list: list[str] = json_field("localDeviceList", default_factory=list)
    remote_thin_pool_name: str = json_field("remoteThinPoolName", default="")


@dataclass
class CreateRDFPair(Payload):
    """Parameters to create SRDF device pairs."""

    rdf_mode: str = json_field("rdfMode", default="")
    rdf_type: str = json_field("rdfType", default="")
    invalidate_r1: bool = json_field("invalidateR1", default=False)
    invalidate_r2: bool = json_field("invalidateR2", default=False)
    establish: bool = json_field("establish", default=False)
    restore: bool = json_field("restore", default=False)
    format: bool = json_field("format", default=False)
    exempt: bool = json_field("exempt", default=False)
    no_wd: bool = json_field("noWD", default=False)
    remote: bool = json_field("remote", default=False)
    bias: bool = json_field("bias", default=False)
    recover_point: bool = json_field("recoverPoint", default=False)
    local_device_auto_criteria: LocalDeviceAutoCriteria | None = json_field(
        "localDeviceAutoCriteriaParam", default=None
    )
    local_device_list_criteria: LocalDeviceListCriteria | None = json_field(
        "localDeviceListCriteriaParam", default=None
    )
    execution_option: str = json_field("executionOption", default="")


@dataclass
class RDFDevicePair(Payload):
    """One SRDF volume pair."""

    local_symm_id: str = json_field("localSymmetrixId", default="")
    remote_symm_id: str = json_field("remoteSymmetrixId", default="")
    local_rdf_group_number: int = json_field("localRdfGroupNumber", default=0)
    remote_rdf_group_number: int = json_field("remoteRdfGroupNumber", default=0)
    local_volume_name: str = json_field("localVolumeName", default="")
    remote_volume_name: str = json_field("remoteVolumeName", default="")
    local_volume_state: str = json_field("localVolumeState", default="")
    remote_volume_state: str = json_field("remoteVolumeState", default="")
    volume_config: str = json_field("volumeConfig", default="")
    rdf_mode: str = json_field("rdfMode", default="")
    rdfpair_state: str = json_field("rdfpairState", default="")
    larger_rdf_side: str = json_field("largerRdfSide", default="")


@dataclass
class RDFDevicePairList(Payload):
    """Newly created SRDF volume pairs."""

    rdf_device_pair: list[RDFDevicePair] = json_field("devicePair", default_factory=list)


@dataclass
class StorageGroupRDFG(Payload):
    """Replication state of a protected storage group."""

    symmetrix_id: str = json_field("symmetrixId", default="")
    storage_group_name: str = json_field("storageGroupName", default="")
    rdf_group_number: int = json_field("rdfGroupNumber", default=0)
    volume_rdf_types: list[str] = json_field("volumeRdfTypes", default_factory=list)
    states: list[str] = json_field("states", default_factory=list)
    modes: list[str] = json_field("modes", default_factory=list)


__all__ = [
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

"""
Greenfield SDK - Python interface for Greenfield decentralized storage
"""

from greenfield_sdk.chain import ChainClient
from greenfield_sdk.client import (
    CreateBucketOptions,
    CreateGroupOptions,
    CreateObjectOptions,
    GreenfieldClient,
    UpdateGroupMemberOptions,
)
from greenfield_sdk.config import (
    get_all_config,
    get_config_value,
    get_redundancy_config,
    initialize_from_env,
    load_config,
    reset_config,
    save_config,
    set_config_value,
)
from greenfield_sdk.erasure_coding import (
    GENERATOR_MATRIX_VERSION,
    ReedSolomonCodec,
    encode_segment,
    reconstruct_segment,
)
from greenfield_sdk.integrity import (
    IntegrityResult,
    RedundancyConfig,
    RedundancyType,
    RootHasher,
    compute_integrity_hash,
    compute_integrity_hash_async,
    iter_segments,
)
from greenfield_sdk.messages import MsgCreateObject, TxOption, TxResponse
from greenfield_sdk.utils import format_size, verify_bucket_name, verify_object_name

__version__ = "0.1.0"
__all__ = [
    "GreenfieldClient",
    "ChainClient",
    "CreateBucketOptions",
    "CreateObjectOptions",
    "CreateGroupOptions",
    "UpdateGroupMemberOptions",
    "IntegrityResult",
    "RedundancyConfig",
    "RedundancyType",
    "RootHasher",
    "ReedSolomonCodec",
    "GENERATOR_MATRIX_VERSION",
    "compute_integrity_hash",
    "compute_integrity_hash_async",
    "iter_segments",
    "encode_segment",
    "reconstruct_segment",
    "MsgCreateObject",
    "TxOption",
    "TxResponse",
    "get_config_value",
    "set_config_value",
    "get_redundancy_config",
    "load_config",
    "save_config",
    "initialize_from_env",
    "get_all_config",
    "reset_config",
    "format_size",
    "verify_bucket_name",
    "verify_object_name",
]

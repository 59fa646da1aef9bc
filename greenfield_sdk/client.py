"""
Main client for the Greenfield SDK.
"""

import logging
from typing import Awaitable, Callable, List, Optional

from pydantic import BaseModel, Field

from greenfield_sdk.chain import ChainClient
from greenfield_sdk.errors import (
    GreenfieldBroadcastError,
    GreenfieldError,
    GreenfieldMissingInputError,
)
from greenfield_sdk.integrity import (
    IntegrityResult,
    ProgressCallback,
    Reader,
    RedundancyConfig,
    RedundancyType,
    compute_integrity_hash_async,
)
from greenfield_sdk.messages import (
    DEFAULT_CONTENT_TYPE,
    Msg,
    MsgCancelCreateObject,
    MsgCreateBucket,
    MsgCreateGroup,
    MsgCreateObject,
    MsgDeleteBucket,
    MsgDeleteGroup,
    MsgDeleteObject,
    MsgDeletePolicy,
    MsgUpdateBucketInfo,
    MsgUpdateGroupMember,
    Principal,
    TxOption,
    TxResponse,
    bucket_grn,
    group_grn,
    object_grn,
)
from greenfield_sdk.utils import verify_bucket_name, verify_object_name

logger = logging.getLogger(__name__)

# Signs and broadcasts a list of messages, returning the transaction hash
Broadcaster = Callable[[List[Msg], Optional[TxOption]], Awaitable[str]]


class CreateBucketOptions(BaseModel):
    """Options used to construct a MsgCreateBucket."""

    is_public: bool = False
    tx_opts: Optional[TxOption] = None
    payment_address: Optional[str] = None
    primary_sp_address: str


class CreateObjectOptions(BaseModel):
    """Options used to construct a MsgCreateObject."""

    is_public: bool = False
    tx_opts: Optional[TxOption] = None
    secondary_sp_addresses: List[str] = Field(default_factory=list)
    content_type: str = ""
    # Replicate every shard verbatim instead of erasure coding it
    is_replica_type: bool = False


class CreateGroupOptions(BaseModel):
    """Options used to construct a MsgCreateGroup."""

    init_group_members: List[str] = Field(default_factory=list)
    tx_opts: Optional[TxOption] = None


class UpdateGroupMemberOptions(BaseModel):
    # Remove the given members instead of adding them
    is_remove: bool = False
    tx_opts: Optional[TxOption] = None


class GreenfieldClient:
    """
    Main client for interacting with the Greenfield storage module.

    Queries redundancy parameters from chain, computes object integrity
    hashes and builds storage messages. Signing and broadcasting are delegated
    to the `broadcaster` coroutine supplied by the caller.
    """

    def __init__(
        self,
        rest_url: Optional[str] = None,
        address: Optional[str] = None,
        broadcaster: Optional[Broadcaster] = None,
        chain_client: Optional[ChainClient] = None,
    ):
        """
        Initialize the Greenfield client.

        Args:
            rest_url: Chain REST endpoint (from config if None)
            address: Account address used as the creator of messages
            broadcaster: Coroutine function (msgs, tx_opts) -> tx hash
            chain_client: Pre-built ChainClient (rest_url is ignored if given)
        """
        self.chain_client = chain_client or ChainClient(rest_url=rest_url)
        self.address = address
        self._broadcaster = broadcaster

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        """Close the underlying HTTP client."""
        await self.chain_client.close()

    def _require_address(self) -> str:
        if not self.address:
            raise ValueError(
                "No account address available. Please provide address when creating the client"
            )
        return self.address

    async def get_redundancy_params(self) -> RedundancyConfig:
        """
        Query the data shards, parity shards and segment size from chain.

        Raises:
            GreenfieldConfigUnavailableError: If the parameters can't be fetched
        """
        return await self.chain_client.get_redundancy_params()

    async def compute_hash_roots(
        self,
        reader: Reader,
        redundancy_type: RedundancyType = RedundancyType.EC,
        redundancy: Optional[RedundancyConfig] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> IntegrityResult:
        """
        Compute the hash roots and size of a payload.

        Args:
            reader: Readable binary stream (or raw bytes) holding the payload
            redundancy_type: Erasure coded (default) or replicated
            redundancy: Explicit parameters; queried from chain if None
            progress_callback: Optional callback (stage_name, segments_done, bytes_done)

        Returns:
            IntegrityResult: One hash root per shard and the payload size
        """
        if reader is None:
            raise GreenfieldMissingInputError(
                "Failed to compute hash of payload: reader is None"
            )

        if redundancy is None:
            redundancy = await self.get_redundancy_params()

        return await compute_integrity_hash_async(
            reader,
            redundancy.segment_size,
            redundancy.data_shards,
            redundancy.parity_shards,
            redundancy_type=redundancy_type,
            progress_callback=progress_callback,
        )

    async def build_create_object_msg(
        self,
        bucket_name: str,
        object_name: str,
        reader: Reader,
        opts: Optional[CreateObjectOptions] = None,
        redundancy: Optional[RedundancyConfig] = None,
    ) -> MsgCreateObject:
        """
        Hash the payload and build a validated MsgCreateObject.

        Args:
            bucket_name: Name of the bucket
            object_name: Name of the object
            reader: Readable binary stream (or raw bytes) holding the payload
            opts: Object creation options
            redundancy: Explicit redundancy parameters; queried from chain if None

        Returns:
            MsgCreateObject: The message, ready to be signed
        """
        if reader is None:
            raise GreenfieldMissingInputError(
                "Failed to compute hash of payload: reader is None"
            )
        opts = opts or CreateObjectOptions()

        verify_bucket_name(bucket_name)
        verify_object_name(object_name)
        creator = self._require_address()

        redundancy_type = (
            RedundancyType.REPLICA if opts.is_replica_type else RedundancyType.EC
        )
        result = await self.compute_hash_roots(reader, redundancy_type, redundancy)

        msg = MsgCreateObject(
            creator=creator,
            bucket_name=bucket_name,
            object_name=object_name,
            payload_size=result.total_size,
            is_public=opts.is_public,
            content_type=opts.content_type or DEFAULT_CONTENT_TYPE,
            expect_checksums=list(result.hash_roots),
            redundancy_type=redundancy_type,
            expect_secondary_sp_addresses=opts.secondary_sp_addresses,
        )
        msg.validate_basic()
        return msg

    async def _broadcast(self, msg: Msg, tx_opts: Optional[TxOption]) -> TxResponse:
        if self._broadcaster is None:
            raise ValueError(
                "No broadcaster available. Please provide broadcaster when creating the client"
            )

        msg.validate_basic()
        logger.info(f"Broadcasting {msg.txn_type} transaction")

        try:
            tx_hash = await self._broadcaster([msg], tx_opts)
        except GreenfieldError:
            raise
        except Exception as e:
            raise GreenfieldBroadcastError(
                f"Failed to broadcast {msg.txn_type}: {e}"
            ) from e

        if not tx_hash:
            raise GreenfieldBroadcastError(
                f"Broadcaster returned no transaction hash for {msg.txn_type}"
            )

        logger.info(f"{msg.txn_type} transaction hash: {tx_hash}")
        return TxResponse(txn_hash=tx_hash, txn_type=msg.txn_type)

    async def create_object(
        self,
        bucket_name: str,
        object_name: str,
        reader: Reader,
        opts: Optional[CreateObjectOptions] = None,
        redundancy: Optional[RedundancyConfig] = None,
    ) -> TxResponse:
        """
        Hash the payload and broadcast a MsgCreateObject.

        Returns:
            TxResponse: Transaction hash and type
        """
        opts = opts or CreateObjectOptions()
        msg = await self.build_create_object_msg(
            bucket_name, object_name, reader, opts, redundancy
        )
        return await self._broadcast(msg, opts.tx_opts)

    async def cancel_create_object(
        self, bucket_name: str, object_name: str, tx_opts: Optional[TxOption] = None
    ) -> TxResponse:
        """Cancel an object that was created but never sealed."""
        msg = MsgCancelCreateObject(
            creator=self._require_address(),
            bucket_name=bucket_name,
            object_name=object_name,
        )
        return await self._broadcast(msg, tx_opts)

    async def delete_object(
        self, bucket_name: str, object_name: str, tx_opts: Optional[TxOption] = None
    ) -> TxResponse:
        msg = MsgDeleteObject(
            creator=self._require_address(),
            bucket_name=bucket_name,
            object_name=object_name,
        )
        return await self._broadcast(msg, tx_opts)

    async def create_bucket(
        self, bucket_name: str, opts: CreateBucketOptions
    ) -> TxResponse:
        msg = MsgCreateBucket(
            creator=self._require_address(),
            bucket_name=bucket_name,
            is_public=opts.is_public,
            primary_sp_address=opts.primary_sp_address,
            payment_address=opts.payment_address,
        )
        return await self._broadcast(msg, opts.tx_opts)

    async def delete_bucket(
        self, bucket_name: str, tx_opts: Optional[TxOption] = None
    ) -> TxResponse:
        msg = MsgDeleteBucket(creator=self._require_address(), bucket_name=bucket_name)
        return await self._broadcast(msg, tx_opts)

    async def update_bucket(
        self,
        bucket_name: str,
        read_quota: int,
        payment_address: Optional[str] = None,
        tx_opts: Optional[TxOption] = None,
    ) -> TxResponse:
        """Set the charged read quota (and optionally the payment account) of a bucket."""
        verify_bucket_name(bucket_name)
        msg = MsgUpdateBucketInfo(
            creator=self._require_address(),
            bucket_name=bucket_name,
            read_quota=read_quota,
            payment_address=payment_address,
        )
        return await self._broadcast(msg, tx_opts)

    async def buy_quota_for_bucket(
        self,
        bucket_name: str,
        target_quota: int,
        payment_address: Optional[str] = None,
        tx_opts: Optional[TxOption] = None,
    ) -> TxResponse:
        """
        Buy read quota for a bucket.

        Args:
            bucket_name: Name of the bucket
            target_quota: The quota the bucket should have afterwards, not an increment
            payment_address: Account paying for the quota (bucket's own if None)
            tx_opts: Transaction options for the broadcaster
        """
        return await self.update_bucket(bucket_name, target_quota, payment_address, tx_opts)

    async def create_group(
        self, group_name: str, opts: Optional[CreateGroupOptions] = None
    ) -> TxResponse:
        opts = opts or CreateGroupOptions()
        msg = MsgCreateGroup(
            creator=self._require_address(),
            group_name=group_name,
            members=opts.init_group_members,
        )
        return await self._broadcast(msg, opts.tx_opts)

    async def delete_group(
        self, group_name: str, tx_opts: Optional[TxOption] = None
    ) -> TxResponse:
        msg = MsgDeleteGroup(creator=self._require_address(), group_name=group_name)
        return await self._broadcast(msg, tx_opts)

    async def update_group_member(
        self,
        group_name: str,
        members: List[str],
        opts: Optional[UpdateGroupMemberOptions] = None,
    ) -> TxResponse:
        """Add members to a group, or remove them if opts.is_remove is set."""
        opts = opts or UpdateGroupMemberOptions()
        if opts.is_remove:
            msg = MsgUpdateGroupMember(
                creator=self._require_address(),
                group_name=group_name,
                members_to_delete=members,
            )
        else:
            msg = MsgUpdateGroupMember(
                creator=self._require_address(),
                group_name=group_name,
                members_to_add=members,
            )
        return await self._broadcast(msg, opts.tx_opts)

    async def _delete_policy(
        self, resource: str, principal_address: str, tx_opts: Optional[TxOption]
    ) -> TxResponse:
        msg = MsgDeletePolicy(
            creator=self._require_address(),
            resource=resource,
            principal=Principal(value=principal_address),
        )
        return await self._broadcast(msg, tx_opts)

    async def delete_bucket_policy(
        self, bucket_name: str, principal_address: str, tx_opts: Optional[TxOption] = None
    ) -> TxResponse:
        """Delete the bucket policy granted to principal_address."""
        verify_bucket_name(bucket_name)
        return await self._delete_policy(bucket_grn(bucket_name), principal_address, tx_opts)

    async def delete_object_policy(
        self,
        bucket_name: str,
        object_name: str,
        principal_address: str,
        tx_opts: Optional[TxOption] = None,
    ) -> TxResponse:
        verify_bucket_name(bucket_name)
        verify_object_name(object_name)
        return await self._delete_policy(
            object_grn(bucket_name, object_name), principal_address, tx_opts
        )

    async def delete_group_policy(
        self, group_name: str, principal_address: str, tx_opts: Optional[TxOption] = None
    ) -> TxResponse:
        """Delete a policy on one of the client account's own groups."""
        resource = group_grn(self._require_address(), group_name)
        return await self._delete_policy(resource, principal_address, tx_opts)
